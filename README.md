# stdpallets

In-memory models of three pieces of on-chain business logic:

- **Asset registry** (`stdpallets.asset_registry`): maps byte-string asset
  names to numeric asset ids and hands out new ids on demand.
- **Market** (`stdpallets.market`, `stdpallets.assets`, `stdpallets.amm_math`):
  a constant-product automated market maker with liquidity-provider tokens and a
  0.3% swap fee, on top of a simple fungible asset ledger.
- **Chain bridge** (`stdpallets.chainbridge`, `stdpallets.bridge_types`):
  relayer management, chain whitelisting, resource registration and
  threshold-based proposal voting for cross-chain transfers.

The package has no dependencies beyond the standard library.

## Installation

```
pip install .
```

## Asset registry

```python
from stdpallets.asset_registry import AssetRegistry

registry = AssetRegistry()
dot = registry.get_or_create_asset(b"DOT")
assert registry.get_or_create_asset(b"DOT") == dot
assert registry.asset_id(b"UNKNOWN") is None
```

`AssetRegistry(core_asset_id, next_asset_id, asset_ids, max_asset_id)` can be
seeded with existing `(name, id)` pairs and the next id to hand out.
`get_or_create_asset` raises `NoIdAvailable` once the next id would pass
`max_asset_id` (by default the largest 32-bit unsigned value).

## Market

```python
from stdpallets.asset_registry import AssetRegistry
from stdpallets.assets import AssetLedger
from stdpallets.market import Market

ledger = AssetLedger()
ledger.mint_into(1, "alice", 1_000_000)
ledger.mint_into(2, "alice", 1_000_000)

market = Market(AssetRegistry(), ledger, account_id="market")
market.mint_liquidity("alice", 1, 10_000, 2, 10_000)
lpt = market.pair(1, 2)
received = market.swap("alice", 1, 100, 2)
print(received, market.reserves(lpt))
```

- `AssetLedger` keeps balances and total issuance per asset, with
  `mint_into`, `burn_from`, `transfer`, `balance` and `total_issuance`;
  it raises `AssetError` when a balance is too low.
- `Market.mint_liquidity` creates a pool on first deposit (the liquidity
  token id comes from the registry under the name `b"lptoken"`) and mints
  liquidity tokens; later deposits must keep the pool's ratio.
- `Market.burn_liquidity` burns liquidity tokens and pays out a pro-rata
  share of both reserves.
- `Market.swap` returns the amount received, computed by
  `stdpallets.market.get_amount_out`.
- Reserves and pool assets are reported ordered by ascending asset id
  (`Market.reserves`, `Market.reward`).

Each market operation is atomic: if it fails, the market, ledger and registry
are left unchanged. Failures raise `MarketError` (with a `MarketErrorKind`),
`AssetError`, or `OverflowError` when an amount passes the 128-bit balance
range. Events are appended to `market.events` as `MarketEvent` values.

`stdpallets.amm_math` provides the integer helpers `sqrt`, `minimum` and
`absdiff`.

## Chain bridge

```python
from stdpallets.bridge_types import Origin, derive_resource_id
from stdpallets.chainbridge import ChainBridge

bridge = ChainBridge(chain_id=5, proposal_lifetime=50)
root = Origin.root()
bridge.set_threshold(root, 2)
for relayer in (2, 3, 4):
    bridge.add_relayer(root, relayer)
bridge.whitelist_chain(root, 1)
r_id = derive_resource_id(1, b"remark")
bridge.set_resource(root, r_id, b"System.remark")

bridge.acknowledge_proposal(Origin.signed(2), 1, 1, r_id, "call")
bridge.acknowledge_proposal(Origin.signed(4), 1, 1, r_id, "call")
print(bridge.votes(1, 1, "call").status)
```

- Administrative calls (`set_threshold`, `set_resource`, `remove_resource`,
  `whitelist_chain`, `add_relayer`, `remove_relayer`) require
  `Origin.root()`.
- Relayers vote with `acknowledge_proposal` and `reject_proposal`;
  `eval_vote_state` re-checks a proposal against the current threshold.
- A proposal expires `proposal_lifetime` blocks after its first vote; the
  current block is the `block_number` attribute, which the caller advances.
- An approved proposal is passed, with the bridge's own signed origin, to the
  optional `dispatcher` callable given to `ChainBridge`.
- `transfer_fungible`, `transfer_nonfungible` and `transfer_generic` bump the
  destination chain's nonce and record an outbound transfer event.

Failures raise `BridgeError` carrying a `BridgeErrorKind`; emitted events are
appended to `bridge.events` as `BridgeEvent` values.

## What this package does not do

Everything is held in memory in plain Python objects. There is no blockchain
node, networking, consensus, persistent storage, transaction fees or weights,
and no command-line tool; callers create the objects and call their methods
directly.

## Running the tests

```
pip install .[test]
pytest
```