"""Constant-product automated market maker over registered assets."""

from __future__ import annotations

import copy
import enum
from collections.abc import Hashable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import ClassVar

from stdpallets import amm_math
from stdpallets.asset_registry import AssetRegistry
from stdpallets.assets import AssetLedger

U128_MAX = 2**128 - 1
U256_MAX = 2**256 - 1
LPTOKEN_NAME = b"lptoken"
DEFAULT_ACCOUNT_ID = b"modlstd/mrkt"


def _checked_mul(a: int, b: int, limit: int = U128_MAX) -> int:
    result = a * b
    if result > limit:
        raise OverflowError("multiplication overflow")
    return result


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int) -> int:
    """Output amount for a swap of ``amount_in`` after the 0.3% fee."""
    amount_in_with_fee = _checked_mul(amount_in, 997, U256_MAX)
    numerator = _checked_mul(amount_in_with_fee, reserve_out, U256_MAX)
    denominator = _checked_mul(reserve_in, 1000, U256_MAX) + amount_in_with_fee
    if denominator > U256_MAX:
        raise OverflowError("addition overflow")
    if denominator == 0:
        raise ZeroDivisionError("divided by zero")
    return numerator // denominator


class MarketErrorKind(enum.Enum):
    AMOUNT_ZERO = "AmountZero"
    BALANCE_LOW = "BalanceLow"
    BALANCE_ZERO = "BalanceZero"
    NOT_THE_CREATOR = "NotTheCreator"
    NOT_APPROVED = "NotApproved"
    CREATED_BY_SYSTEM = "CreatedBySystem"
    NONE_VALUE = "NoneValue"
    INSUFFICIENT_BALANCE = "InSufficientBalance"
    PAIR_EXISTS = "PairExists"
    LPT_EXISTS = "LptExists"
    INVALID_PAIR = "InvalidPair"
    IDENTICAL_IDENTIFIER = "IdenticalIdentifier"
    INSUFFICIENT_LIQUIDITY_MINTED = "InsufficientLiquidityMinted"
    INSUFFICIENT_LIQUIDITY_BURNED = "InsufficientLiquidityBurned"
    INSUFFICIENT_OUTPUT_AMOUNT = "InsufficientOutputAmount"
    INSUFFICIENT_AMOUNT = "InsufficientAmount"
    INSUFFICIENT_LIQUIDITY = "InsufficientLiquidity"
    K = "K"


class MarketError(Exception):
    """A market operation was refused."""

    def __init__(self, kind: MarketErrorKind, message: str | None = None) -> None:
        super().__init__(message or kind.value)
        self.kind = kind


@dataclass(frozen=True)
class MarketEvent:
    """An event deposited by the market, identified by name with its arguments."""

    name: str
    args: tuple = ()

    NAMES: ClassVar[frozenset[str]] = frozenset(
        {"CreatePair", "Swap", "MintedLiquidity", "BurnedLiquidity", "SyncOracle"}
    )

    def __post_init__(self) -> None:
        if self.name not in self.NAMES:
            raise ValueError(f"unknown market event: {self.name!r}")
        object.__setattr__(self, "args", tuple(self.args))


class Market:
    """Liquidity pools between pairs of assets, with swaps and LP tokens.

    Each public operation is atomic: on failure, the market, ledger and
    registry are left as they were.
    """

    def __init__(
        self,
        registry: AssetRegistry,
        assets: AssetLedger,
        account_id: Hashable = DEFAULT_ACCOUNT_ID,
    ) -> None:
        self.registry = registry
        self.assets = assets
        self.account_id = account_id
        self.events: list[MarketEvent] = []
        self._reserves: dict[int, tuple[int, int]] = {}
        self._rewards: dict[int, tuple[int, int]] = {}
        self._pairs: dict[tuple[int, int], int] = {}

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        market_state = (
            list(self.events),
            dict(self._reserves),
            dict(self._rewards),
            dict(self._pairs),
        )
        others = [(obj, copy.deepcopy(vars(obj))) for obj in (self.assets, self.registry)]
        try:
            yield
        except BaseException:
            self.events, self._reserves, self._rewards, self._pairs = market_state
            for obj, state in others:
                vars(obj).clear()
                vars(obj).update(state)
            raise

    def reserves(self, lpt: int) -> tuple[int, int]:
        """Reserves of a pool, ordered by ascending asset id."""
        return self._reserves.get(lpt, (0, 0))

    def reward(self, lpt: int) -> tuple[int, int]:
        """The two assets of a pool, ordered by ascending asset id."""
        return self._rewards.get(lpt, (0, 0))

    def pair(self, token0: int, token1: int) -> int | None:
        """Liquidity token of the pool between two assets, or None."""
        return self._pairs.get((token0, token1))

    def _set_reserves(
        self, token0: int, token1: int, amount0: int, amount1: int, lptoken: int
    ) -> None:
        if token0 > token1:
            self._reserves[lptoken] = (amount1, amount0)
        else:
            self._reserves[lptoken] = (amount0, amount1)

    def _set_pair(self, token0: int, token1: int, lptoken: int) -> None:
        self._pairs[(token0, token1)] = lptoken
        self._pairs[(token1, token0)] = lptoken

    def _set_rewards(self, token0: int, token1: int, lptoken: int) -> None:
        self._rewards[lptoken] = (token1, token0) if token0 > token1 else (token0, token1)

    def mint_liquidity(
        self, sender: Hashable, token0: int, amount0: int, token1: int, amount1: int
    ) -> None:
        """Deposit both assets into a pool and mint liquidity tokens to ``sender``."""
        with self._atomic():
            if token0 == token1:
                raise MarketError(MarketErrorKind.IDENTICAL_IDENTIFIER)
            self.assets.transfer(token0, sender, self.account_id, amount0)
            self.assets.transfer(token1, sender, self.account_id, amount1)

            lpt = self.pair(token0, token1)
            if lpt is None:
                lptoken_amount = amm_math.sqrt(_checked_mul(amount0, amount1)) - 1
                if lptoken_amount < 0:
                    raise OverflowError("integer underflow")
                lptoken_id = self.registry.get_or_create_asset(LPTOKEN_NAME)
                self._set_reserves(token0, token1, amount0, amount1, lptoken_id)
                self._set_pair(token0, token1, lptoken_id)
                self._set_rewards(token0, token1, lptoken_id)
                self.assets.mint_into(lptoken_id, sender, lptoken_amount)
                self.events.append(MarketEvent("CreatePair", (token0, token1, lptoken_id)))
                return

            total_supply = self.assets.total_issuance(lpt)
            if total_supply <= 0:
                raise MarketError(MarketErrorKind.NONE_VALUE)
            reserve0, reserve1 = self.reserves(lpt)
            ratio = reserve0 // reserve1
            if token0 > token1:
                drift = amm_math.absdiff(_checked_mul(ratio, amount0), amount1)
            else:
                drift = amm_math.absdiff(_checked_mul(ratio, amount1), amount0)
            if not drift < amount0 // 1000:
                raise MarketError(MarketErrorKind.K)
            left = _checked_mul(amount0, total_supply) // reserve0
            right = _checked_mul(amount1, total_supply) // reserve1
            lptoken_amount = amm_math.minimum(left, right)
            reserve0 += amount0
            reserve1 += amount1
            self._set_reserves(token0, token1, reserve0, reserve1, lpt)
            self.assets.mint_into(lpt, sender, lptoken_amount)
            self.events.append(MarketEvent("MintedLiquidity", (token0, token1, lpt)))

    def burn_liquidity(self, sender: Hashable, lpt: int, amount: int) -> None:
        """Burn liquidity tokens and pay ``sender`` a pro-rata share of the pool."""
        with self._atomic():
            reserve0, reserve1 = self.reserves(lpt)
            token0, token1 = self.reward(lpt)
            total_supply = self.assets.total_issuance(lpt)
            if total_supply == 0:
                raise ZeroDivisionError("divide by zero")
            reward0 = _checked_mul(amount, reserve0) // total_supply
            reward1 = _checked_mul(amount, reserve1) // total_supply
            if not (reward0 > 0 and reward1 > 0):
                raise MarketError(MarketErrorKind.INSUFFICIENT_LIQUIDITY_BURNED)

            self.assets.burn_from(lpt, sender, amount)
            self.assets.transfer(token0, self.account_id, sender, reward0)
            self.assets.transfer(token1, self.account_id, sender, reward1)

            self._set_reserves(token0, token1, reserve0 - reward0, reserve1 - reward1, lpt)
            self.events.append(MarketEvent("BurnedLiquidity", (lpt, token0, token1)))

    def swap(
        self, sender: Hashable, from_asset: int, amount_in: int, to_asset: int
    ) -> int:
        """Exchange ``amount_in`` of one asset for another; returns the amount received."""
        with self._atomic():
            if not amount_in > 0:
                raise MarketError(MarketErrorKind.INSUFFICIENT_AMOUNT)
            lpt = self.pair(from_asset, to_asset)
            if lpt is None:
                raise MarketError(MarketErrorKind.INVALID_PAIR)
            reserve0, reserve1 = self.reserves(lpt)
            if not (reserve0 > 0 and reserve1 > 0):
                raise MarketError(MarketErrorKind.INSUFFICIENT_LIQUIDITY)
            if from_asset > to_asset:
                reserve_in, reserve_out = reserve1, reserve0
            else:
                reserve_in, reserve_out = reserve0, reserve1

            amount_out = get_amount_out(amount_in, reserve_in, reserve_out)
            self.assets.transfer(from_asset, sender, self.account_id, amount_in)
            self.assets.transfer(to_asset, self.account_id, sender, amount_out)

            self._set_reserves(
                from_asset, to_asset, reserve_in + amount_in, reserve_out - amount_out, lpt
            )
            self.events.append(
                MarketEvent("Swap", (from_asset, amount_in, to_asset, amount_out))
            )
            return amount_out