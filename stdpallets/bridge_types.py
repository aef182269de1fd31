"""Value types shared by the cross-chain bridge."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, ClassVar, Hashable

RESOURCE_ID_LENGTH = 32


def derive_resource_id(chain: int, id: bytes) -> bytes:
    """Build a 32-byte resource id: left-padded unique id (max 31 bytes) plus chain byte."""
    body = bytes(id)[:RESOURCE_ID_LENGTH - 1]
    padding = bytes(RESOURCE_ID_LENGTH - 1 - len(body))
    return padding + body + bytes([chain])


class ProposalStatus(enum.Enum):
    INITIATED = "initiated"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class ProposalVotes:
    """Votes cast on one bridge proposal."""

    votes_for: list = field(default_factory=list)
    votes_against: list = field(default_factory=list)
    status: ProposalStatus = ProposalStatus.INITIATED
    expiry: int = 0

    def try_to_complete(self, threshold: int, total: int) -> ProposalStatus:
        """Mark the proposal approved or rejected if the votes allow it."""
        if len(self.votes_for) >= threshold:
            self.status = ProposalStatus.APPROVED
            return ProposalStatus.APPROVED
        if total >= threshold and len(self.votes_against) + threshold > total:
            self.status = ProposalStatus.REJECTED
            return ProposalStatus.REJECTED
        return ProposalStatus.INITIATED

    def is_complete(self) -> bool:
        return self.status is not ProposalStatus.INITIATED

    def has_voted(self, who: Any) -> bool:
        return who in self.votes_for or who in self.votes_against

    def is_expired(self, now: int) -> bool:
        return self.expiry <= now


@dataclass(frozen=True)
class Origin:
    """Caller of a dispatchable: root, or a signed account."""

    who: Hashable | None = None
    is_root: bool = False

    @classmethod
    def root(cls) -> Origin:
        return cls(who=None, is_root=True)

    @classmethod
    def signed(cls, who: Hashable) -> Origin:
        return cls(who=who, is_root=False)


class BridgeErrorKind(enum.Enum):
    BAD_ORIGIN = "BadOrigin"
    THRESHOLD_NOT_SET = "ThresholdNotSet"
    INVALID_CHAIN_ID = "InvalidChainId"
    INVALID_THRESHOLD = "InvalidThreshold"
    CHAIN_NOT_WHITELISTED = "ChainNotWhitelisted"
    CHAIN_ALREADY_WHITELISTED = "ChainAlreadyWhitelisted"
    RESOURCE_DOES_NOT_EXIST = "ResourceDoesNotExist"
    RELAYER_ALREADY_EXISTS = "RelayerAlreadyExists"
    RELAYER_INVALID = "RelayerInvalid"
    MUST_BE_RELAYER = "MustBeRelayer"
    RELAYER_ALREADY_VOTED = "RelayerAlreadyVoted"
    PROPOSAL_ALREADY_EXISTS = "ProposalAlreadyExists"
    PROPOSAL_DOES_NOT_EXIST = "ProposalDoesNotExist"
    PROPOSAL_NOT_COMPLETE = "ProposalNotComplete"
    PROPOSAL_ALREADY_COMPLETE = "ProposalAlreadyComplete"
    PROPOSAL_EXPIRED = "ProposalExpired"


class BridgeError(Exception):
    """A bridge operation was refused."""

    def __init__(self, kind: BridgeErrorKind, message: str | None = None) -> None:
        super().__init__(message or kind.value)
        self.kind = kind


@dataclass(frozen=True)
class BridgeEvent:
    """An event deposited by the bridge, identified by name with its arguments."""

    name: str
    args: tuple = ()

    NAMES: ClassVar[frozenset[str]] = frozenset(
        {
            "RelayerThresholdChanged",
            "ChainWhitelisted",
            "RelayerAdded",
            "RelayerRemoved",
            "FungibleTransfer",
            "NonFungibleTransfer",
            "GenericTransfer",
            "VoteFor",
            "VoteAgainst",
            "ProposalApproved",
            "ProposalRejected",
            "ProposalSucceeded",
            "ProposalFailed",
        }
    )

    def __post_init__(self) -> None:
        if self.name not in self.NAMES:
            raise ValueError(f"unknown bridge event: {self.name!r}")
        object.__setattr__(self, "args", tuple(self.args))