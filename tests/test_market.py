import pytest

from stdpallets.asset_registry import AssetRegistry
from stdpallets.assets import AssetError, AssetLedger
from stdpallets.market import (
    Market,
    MarketError,
    MarketErrorKind,
    MarketEvent,
    get_amount_out,
)

ALICE = "alice"
BOB = "bob"
FUNDS = 10**6


@pytest.fixture
def ledger():
    book = AssetLedger()
    for asset in (1, 2, 3):
        book.mint_into(asset, ALICE, FUNDS)
    return book


@pytest.fixture
def market(ledger):
    return Market(AssetRegistry(next_asset_id=5), ledger, account_id="pool")


@pytest.fixture
def pooled(market):
    market.mint_liquidity(ALICE, 1, 4000, 2, 1000)
    return market


def test_get_amount_out_worked_example():
    assert get_amount_out(1000, 1000000, 1000000) == 996


def test_get_amount_out_zero_input():
    assert get_amount_out(0, 500, 500) == 0


@pytest.mark.parametrize("amount_in", [1, 10, 1000, 10**9])
def test_get_amount_out_never_drains_reserve(amount_in):
    reserve_in, reserve_out = 5000, 7000
    out = get_amount_out(amount_in, reserve_in, reserve_out)
    assert 0 <= out < reserve_out
    assert (reserve_in + amount_in) * (reserve_out - out) >= reserve_in * reserve_out


def test_get_amount_out_overflow():
    with pytest.raises(OverflowError):
        get_amount_out(2**255, 1, 1)


def test_create_pair(pooled, ledger):
    assert pooled.pair(1, 2) == 5
    assert pooled.pair(2, 1) == 5
    assert pooled.reserves(5) == (4000, 1000)
    assert pooled.reward(5) == (1, 2)
    assert ledger.balance(5, ALICE) == 1999
    assert ledger.balance(1, "pool") == 4000
    assert ledger.balance(2, "pool") == 1000
    assert pooled.events == [MarketEvent("CreatePair", (1, 2, 5))]


def test_create_pair_reversed_order_sorts_reserves(market):
    market.mint_liquidity(ALICE, 2, 1000, 1, 4000)
    assert market.reserves(5) == (4000, 1000)
    assert market.reward(5) == (1, 2)


def test_identical_identifier(market, ledger):
    with pytest.raises(MarketError) as info:
        market.mint_liquidity(ALICE, 1, 10, 1, 10)
    assert info.value.kind is MarketErrorKind.IDENTICAL_IDENTIFIER
    assert ledger.balance(1, ALICE) == FUNDS


def test_mint_more_into_existing_pool(pooled, ledger):
    first = ledger.balance(5, ALICE)
    pooled.mint_liquidity(ALICE, 1, 4000, 2, 1000)
    assert ledger.balance(5, ALICE) == 2 * first
    assert ledger.total_issuance(5) == 2 * first
    assert pooled.reserves(5) == (8000, 2000)
    assert pooled.events[-1] == MarketEvent("MintedLiquidity", (1, 2, 5))


def test_mint_with_wrong_ratio_is_atomic(pooled, ledger):
    before = (ledger.balance(1, ALICE), ledger.balance(2, ALICE))
    with pytest.raises(MarketError) as info:
        pooled.mint_liquidity(ALICE, 1, 4000, 2, 500)
    assert info.value.kind is MarketErrorKind.K
    assert (ledger.balance(1, ALICE), ledger.balance(2, ALICE)) == before
    assert pooled.reserves(5) == (4000, 1000)
    assert len(pooled.events) == 1


def test_mint_without_funds_fails(market, ledger):
    with pytest.raises(AssetError):
        market.mint_liquidity(BOB, 1, 10, 2, 10)
    assert market.pair(1, 2) is None
    assert ledger.total_issuance(5) == 0


def test_swap_forward(pooled, ledger):
    expected = get_amount_out(100, 4000, 1000)
    out = pooled.swap(ALICE, 1, 100, 2)
    assert out == expected
    assert ledger.balance(2, ALICE) == FUNDS - 1000 + out
    assert ledger.balance(1, ALICE) == FUNDS - 4000 - 100
    assert pooled.reserves(5) == (4100, 1000 - out)
    assert pooled.events[-1] == MarketEvent("Swap", (1, 100, 2, out))


def test_swap_backward_uses_reverse_reserves(pooled):
    out = pooled.swap(ALICE, 2, 100, 1)
    assert out == get_amount_out(100, 1000, 4000)
    assert pooled.reserves(5) == (4000 - out, 1100)


def test_swap_keeps_product(pooled):
    r0, r1 = pooled.reserves(5)
    pooled.swap(ALICE, 1, 250, 2)
    n0, n1 = pooled.reserves(5)
    assert n0 * n1 >= r0 * r1


def test_swap_zero_amount(pooled):
    with pytest.raises(MarketError) as info:
        pooled.swap(ALICE, 1, 0, 2)
    assert info.value.kind is MarketErrorKind.INSUFFICIENT_AMOUNT


def test_swap_unknown_pair(pooled):
    with pytest.raises(MarketError) as info:
        pooled.swap(ALICE, 1, 10, 3)
    assert info.value.kind is MarketErrorKind.INVALID_PAIR


def test_burn_returns_share(pooled, ledger):
    lp = ledger.balance(5, ALICE)
    r0, r1 = pooled.reserves(5)
    pooled.burn_liquidity(ALICE, 5, lp)
    n0, n1 = pooled.reserves(5)
    assert ledger.balance(5, ALICE) == 0
    assert ledger.balance(1, ALICE) == FUNDS - 4000 + (r0 - n0)
    assert ledger.balance(2, ALICE) == FUNDS - 1000 + (r1 - n1)
    assert ledger.balance(1, "pool") == n0
    assert pooled.events[-1] == MarketEvent("BurnedLiquidity", (5, 1, 2))


def test_burn_zero_fails(pooled, ledger):
    with pytest.raises(MarketError) as info:
        pooled.burn_liquidity(ALICE, 5, 0)
    assert info.value.kind is MarketErrorKind.INSUFFICIENT_LIQUIDITY_BURNED
    assert ledger.total_issuance(5) == 1999


def test_burn_more_than_held_is_atomic(pooled, ledger):
    ledger.transfer(5, ALICE, BOB, 10)
    with pytest.raises(AssetError):
        pooled.burn_liquidity(BOB, 5, 11)
    assert ledger.balance(5, BOB) == 10
    assert pooled.reserves(5) == (4000, 1000)


def test_unknown_event_name_rejected():
    with pytest.raises(ValueError):
        MarketEvent("Nope")