"""In-memory ledger of fungible assets held by accounts."""

from __future__ import annotations

from collections.abc import Hashable


class AssetError(Exception):
    """A ledger operation could not be carried out."""


def _check_amount(amount: int) -> None:
    if amount < 0:
        raise ValueError("amount cannot be negative")


class AssetLedger:
    """Balances and total issuance of fungible assets, keyed by asset id."""

    def __init__(self) -> None:
        self._balances: dict[tuple[int, Hashable], int] = {}
        self._issuance: dict[int, int] = {}

    def balance(self, asset: int, who: Hashable) -> int:
        """Balance of ``who`` in ``asset``; zero when never credited."""
        return self._balances.get((asset, who), 0)

    def total_issuance(self, asset: int) -> int:
        """Total amount of ``asset`` in existence."""
        return self._issuance.get(asset, 0)

    def _set_balance(self, asset: int, who: Hashable, amount: int) -> None:
        if amount:
            self._balances[(asset, who)] = amount
        else:
            self._balances.pop((asset, who), None)

    def mint_into(self, asset: int, who: Hashable, amount: int) -> None:
        """Create ``amount`` new units of ``asset`` in the account ``who``."""
        _check_amount(amount)
        self._set_balance(asset, who, self.balance(asset, who) + amount)
        self._issuance[asset] = self.total_issuance(asset) + amount

    def burn_from(self, asset: int, who: Hashable, amount: int) -> None:
        """Destroy ``amount`` units of ``asset`` held by ``who``."""
        _check_amount(amount)
        held = self.balance(asset, who)
        if held < amount:
            raise AssetError(f"balance of asset {asset} too low to burn {amount}")
        self._set_balance(asset, who, held - amount)
        self._issuance[asset] = self.total_issuance(asset) - amount

    def transfer(self, asset: int, source: Hashable, dest: Hashable, amount: int) -> None:
        """Move ``amount`` units of ``asset`` from ``source`` to ``dest``."""
        _check_amount(amount)
        held = self.balance(asset, source)
        if held < amount:
            raise AssetError(f"balance of asset {asset} too low to transfer {amount}")
        self._set_balance(asset, source, held - amount)
        self._set_balance(asset, dest, self.balance(asset, dest) + amount)