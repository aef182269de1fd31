"""Registry mapping asset names to numeric asset identifiers."""

from __future__ import annotations

from collections.abc import Iterable

U32_MAX = 2**32 - 1


class NoIdAvailable(Exception):
    """Raised when the identifier space is exhausted."""


class AssetRegistry:
    """Hands out sequential asset identifiers keyed by byte-string names."""

    def __init__(
        self,
        core_asset_id: int = 0,
        next_asset_id: int = 0,
        asset_ids: Iterable[tuple[bytes, int]] = (),
        max_asset_id: int = U32_MAX,
    ) -> None:
        self.core_asset_id = core_asset_id
        self.next_asset_id = next_asset_id
        self.max_asset_id = max_asset_id
        self._asset_ids: dict[bytes, int] = {
            bytes(name): asset_id for name, asset_id in asset_ids
        }

    def get_or_create_asset(self, name: bytes) -> int:
        """Return the identifier for ``name``, registering it if unknown."""
        key = bytes(name)
        existing = self._asset_ids.get(key)
        if existing is not None:
            return existing
        asset_id = self.next_asset_id
        if asset_id + 1 > self.max_asset_id:
            raise NoIdAvailable(f"no asset id available after {asset_id}")
        self.next_asset_id = asset_id + 1
        self._asset_ids[key] = asset_id
        return asset_id

    def asset_id(self, name: bytes) -> int | None:
        """Return the identifier registered for ``name``, or None."""
        return self._asset_ids.get(bytes(name))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, (bytes, bytearray)) and bytes(name) in self._asset_ids

    def __len__(self) -> int:
        return len(self._asset_ids)