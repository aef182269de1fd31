"""Relayer-voted bridge for moving assets and calls between chains."""

from __future__ import annotations

from collections.abc import Callable, Hashable
from dataclasses import replace
from typing import Any

from stdpallets.bridge_types import (
    RESOURCE_ID_LENGTH,
    BridgeError,
    BridgeErrorKind,
    BridgeEvent,
    Origin,
    ProposalStatus,
    ProposalVotes,
)

DEFAULT_RELAYER_THRESHOLD = 1
PALLET_ID = b"cb/bridg"
DEFAULT_ACCOUNT_ID = b"modl" + PALLET_ID

Dispatcher = Callable[[Origin, Any], Any]


def _copy_votes(votes: ProposalVotes) -> ProposalVotes:
    return replace(
        votes,
        votes_for=list(votes.votes_for),
        votes_against=list(votes.votes_against),
    )


class ChainBridge:
    """Bridge state: whitelisted chains, relayers, resources and proposal votes.

    Approved proposals are handed to ``dispatcher`` together with the bridge's
    own signed origin; an exception from the dispatcher propagates.
    """

    def __init__(
        self,
        chain_id: int,
        proposal_lifetime: int,
        dispatcher: Dispatcher | None = None,
        account_id: Hashable = DEFAULT_ACCOUNT_ID,
    ) -> None:
        self.chain_id = chain_id
        self.proposal_lifetime = proposal_lifetime
        self.dispatcher = dispatcher
        self.account_id = account_id
        self.block_number = 0
        self.relayer_threshold = DEFAULT_RELAYER_THRESHOLD
        self.events: list[BridgeEvent] = []
        self._chain_nonces: dict[int, int] = {}
        self._relayers: set[Hashable] = set()
        self._resources: dict[bytes, bytes] = {}
        self._votes: dict[tuple[int, int, Hashable], ProposalVotes] = {}

    # *** Origins and queries ***

    def ensure_admin(self, origin: Origin) -> None:
        """Require the root origin."""
        if not origin.is_root:
            raise BridgeError(BridgeErrorKind.BAD_ORIGIN)

    def ensure_bridge(self, origin: Origin) -> Hashable:
        """Require the bridge account's own signed origin and return it."""
        if origin.is_root or origin.who != self.account_id:
            raise BridgeError(BridgeErrorKind.BAD_ORIGIN)
        return self.account_id

    @staticmethod
    def _ensure_signed(origin: Origin) -> Hashable:
        if origin.is_root or origin.who is None:
            raise BridgeError(BridgeErrorKind.BAD_ORIGIN)
        return origin.who

    @property
    def relayer_count(self) -> int:
        return len(self._relayers)

    def is_relayer(self, who: Hashable) -> bool:
        return who in self._relayers

    def resource_exists(self, id: bytes) -> bool:
        return bytes(id) in self._resources

    def chain_whitelisted(self, id: int) -> bool:
        return id in self._chain_nonces

    def resources(self, id: bytes) -> bytes | None:
        """Method registered for a resource id, or None."""
        return self._resources.get(bytes(id))

    def chain_nonce(self, id: int) -> int | None:
        """Deposit nonce of a whitelisted chain, or None."""
        return self._chain_nonces.get(id)

    def votes(self, src_id: int, nonce: int, prop: Hashable) -> ProposalVotes | None:
        """A copy of the votes on a proposal, or None if it was never voted on."""
        stored = self._votes.get((src_id, nonce, prop))
        return None if stored is None else _copy_votes(stored)

    def _deposit_event(self, name: str, *args: Any) -> None:
        self.events.append(BridgeEvent(name, args))

    def _bump_nonce(self, id: int) -> int:
        nonce = self._chain_nonces.get(id, 0) + 1
        self._chain_nonces[id] = nonce
        return nonce

    # *** Dispatchables ***

    def set_threshold(self, origin: Origin, threshold: int) -> None:
        self.ensure_admin(origin)
        self.set_relayer_threshold(threshold)

    def set_resource(self, origin: Origin, id: bytes, method: bytes) -> None:
        self.ensure_admin(origin)
        self.register_resource(id, method)

    def remove_resource(self, origin: Origin, id: bytes) -> None:
        self.ensure_admin(origin)
        self.unregister_resource(id)

    def whitelist_chain(self, origin: Origin, id: int) -> None:
        self.ensure_admin(origin)
        self.whitelist(id)

    def add_relayer(self, origin: Origin, v: Hashable) -> None:
        self.ensure_admin(origin)
        self.register_relayer(v)

    def remove_relayer(self, origin: Origin, v: Hashable) -> None:
        self.ensure_admin(origin)
        self.unregister_relayer(v)

    def _check_voter(self, origin: Origin, src_id: int, r_id: bytes) -> Hashable:
        who = self._ensure_signed(origin)
        if not self.is_relayer(who):
            raise BridgeError(BridgeErrorKind.MUST_BE_RELAYER)
        if not self.chain_whitelisted(src_id):
            raise BridgeError(BridgeErrorKind.CHAIN_NOT_WHITELISTED)
        if not self.resource_exists(r_id):
            raise BridgeError(BridgeErrorKind.RESOURCE_DOES_NOT_EXIST)
        return who

    def acknowledge_proposal(
        self, origin: Origin, nonce: int, src_id: int, r_id: bytes, call: Hashable
    ) -> None:
        """Vote for a proposal, creating it if needed, and execute it once approved."""
        who = self._check_voter(origin, src_id, r_id)
        self._commit_vote(who, nonce, src_id, call, in_favour=True)
        self._try_resolve_proposal(nonce, src_id, call)

    def reject_proposal(
        self, origin: Origin, nonce: int, src_id: int, r_id: bytes, call: Hashable
    ) -> None:
        """Vote against a proposal and cancel it once rejection is certain."""
        who = self._check_voter(origin, src_id, r_id)
        self._commit_vote(who, nonce, src_id, call, in_favour=False)
        self._try_resolve_proposal(nonce, src_id, call)

    def eval_vote_state(
        self, origin: Origin, nonce: int, src_id: int, prop: Hashable
    ) -> None:
        """Re-evaluate a proposal against the current threshold."""
        self._ensure_signed(origin)
        self._try_resolve_proposal(nonce, src_id, prop)

    # *** Admin operations ***

    def set_relayer_threshold(self, threshold: int) -> None:
        if threshold <= 0:
            raise BridgeError(BridgeErrorKind.INVALID_THRESHOLD)
        self.relayer_threshold = threshold
        self._deposit_event("RelayerThresholdChanged", threshold)

    def register_resource(self, id: bytes, method: bytes) -> None:
        key = bytes(id)
        if len(key) != RESOURCE_ID_LENGTH:
            raise ValueError(f"resource id must be {RESOURCE_ID_LENGTH} bytes")
        self._resources[key] = bytes(method)

    def unregister_resource(self, id: bytes) -> None:
        self._resources.pop(bytes(id), None)

    def whitelist(self, id: int) -> None:
        if id == self.chain_id:
            raise BridgeError(BridgeErrorKind.INVALID_CHAIN_ID)
        if self.chain_whitelisted(id):
            raise BridgeError(BridgeErrorKind.CHAIN_ALREADY_WHITELISTED)
        self._chain_nonces[id] = 0
        self._deposit_event("ChainWhitelisted", id)

    def register_relayer(self, relayer: Hashable) -> None:
        if self.is_relayer(relayer):
            raise BridgeError(BridgeErrorKind.RELAYER_ALREADY_EXISTS)
        self._relayers.add(relayer)
        self._deposit_event("RelayerAdded", relayer)

    def unregister_relayer(self, relayer: Hashable) -> None:
        if not self.is_relayer(relayer):
            raise BridgeError(BridgeErrorKind.RELAYER_INVALID)
        self._relayers.remove(relayer)
        self._deposit_event("RelayerRemoved", relayer)

    # *** Voting and execution ***

    def _commit_vote(
        self, who: Hashable, nonce: int, src_id: int, prop: Hashable, in_favour: bool
    ) -> None:
        now = self.block_number
        key = (src_id, nonce, prop)
        stored = self._votes.get(key)
        if stored is None:
            votes = ProposalVotes(expiry=now + self.proposal_lifetime)
        else:
            votes = _copy_votes(stored)

        if votes.is_complete():
            raise BridgeError(BridgeErrorKind.PROPOSAL_ALREADY_COMPLETE)
        if votes.is_expired(now):
            raise BridgeError(BridgeErrorKind.PROPOSAL_EXPIRED)
        if votes.has_voted(who):
            raise BridgeError(BridgeErrorKind.RELAYER_ALREADY_VOTED)

        if in_favour:
            votes.votes_for.append(who)
            self._deposit_event("VoteFor", src_id, nonce, who)
        else:
            votes.votes_against.append(who)
            self._deposit_event("VoteAgainst", src_id, nonce, who)
        self._votes[key] = votes

    def _try_resolve_proposal(self, nonce: int, src_id: int, prop: Hashable) -> None:
        key = (src_id, nonce, prop)
        stored = self._votes.get(key)
        if stored is None:
            raise BridgeError(BridgeErrorKind.PROPOSAL_DOES_NOT_EXIST)
        votes = _copy_votes(stored)
        now = self.block_number
        if votes.is_complete():
            raise BridgeError(BridgeErrorKind.PROPOSAL_ALREADY_COMPLETE)
        if votes.is_expired(now):
            raise BridgeError(BridgeErrorKind.PROPOSAL_EXPIRED)

        status = votes.try_to_complete(self.relayer_threshold, self.relayer_count)
        self._votes[key] = votes

        if status is ProposalStatus.APPROVED:
            self._finalize_execution(src_id, nonce, prop)
        elif status is ProposalStatus.REJECTED:
            self._deposit_event("ProposalRejected", src_id, nonce)

    def _finalize_execution(self, src_id: int, nonce: int, call: Hashable) -> None:
        self._deposit_event("ProposalApproved", src_id, nonce)
        if self.dispatcher is not None:
            self.dispatcher(Origin.signed(self.account_id), call)
        self._deposit_event("ProposalSucceeded", src_id, nonce)

    # *** Outbound transfers ***

    def _require_whitelisted(self, dest_id: int) -> None:
        if not self.chain_whitelisted(dest_id):
            raise BridgeError(BridgeErrorKind.CHAIN_NOT_WHITELISTED)

    def transfer_fungible(
        self, dest_id: int, resource_id: bytes, to: bytes, amount: int
    ) -> None:
        """Start a transfer of a fungible asset to another chain."""
        if not 0 <= amount < 2**256:
            raise ValueError("amount must fit in 256 bits")
        self._require_whitelisted(dest_id)
        nonce = self._bump_nonce(dest_id)
        self._deposit_event(
            "FungibleTransfer", dest_id, nonce, bytes(resource_id), amount, bytes(to)
        )

    def transfer_nonfungible(
        self,
        dest_id: int,
        resource_id: bytes,
        token_id: bytes,
        to: bytes,
        metadata: bytes,
    ) -> None:
        """Start a transfer of a non-fungible asset to another chain."""
        self._require_whitelisted(dest_id)
        nonce = self._bump_nonce(dest_id)
        self._deposit_event(
            "NonFungibleTransfer",
            dest_id,
            nonce,
            bytes(resource_id),
            bytes(token_id),
            bytes(to),
            bytes(metadata),
        )

    def transfer_generic(self, dest_id: int, resource_id: bytes, metadata: bytes) -> None:
        """Start a transfer of a generic data payload to another chain."""
        self._require_whitelisted(dest_id)
        nonce = self._bump_nonce(dest_id)
        self._deposit_event(
            "GenericTransfer", dest_id, nonce, bytes(resource_id), bytes(metadata)
        )