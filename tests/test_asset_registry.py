import pytest

from stdpallets.asset_registry import AssetRegistry, NoIdAvailable


def test_create_asset():
    registry = AssetRegistry()
    assert registry.get_or_create_asset(b"STD") == 0

    dot_asset_id = registry.get_or_create_asset(b"DOT")
    assert dot_asset_id == 1

    assert registry.get_or_create_asset(b"BTC") == 2

    current_asset_id = registry.next_asset_id
    assert registry.get_or_create_asset(b"DOT") == dot_asset_id
    assert registry.next_asset_id == current_asset_id
    assert registry.asset_id(b"DOT") == 1
    assert registry.asset_id(b"AAA") is None


def test_genesis_configuration():
    registry = AssetRegistry(
        core_asset_id=1,
        next_asset_id=5,
        asset_ids=[(b"STD", 1), (b"MTR", 2), (b"DOT", 3), (b"KSM", 4)],
    )
    assert registry.core_asset_id == 1
    assert registry.asset_id(b"KSM") == 4
    assert registry.get_or_create_asset(b"MTR") == 2
    assert registry.get_or_create_asset(b"lptoken") == 5
    assert registry.next_asset_id == 6
    assert len(registry) == 5


def test_no_id_available_leaves_state_unchanged():
    registry = AssetRegistry(next_asset_id=7, max_asset_id=7)
    with pytest.raises(NoIdAvailable):
        registry.get_or_create_asset(b"NEW")
    assert registry.next_asset_id == 7
    assert registry.asset_id(b"NEW") is None


def test_last_id_before_limit_is_issued():
    registry = AssetRegistry(next_asset_id=6, max_asset_id=7)
    assert registry.get_or_create_asset(b"A") == 6
    with pytest.raises(NoIdAvailable):
        registry.get_or_create_asset(b"B")


def test_contains():
    registry = AssetRegistry()
    registry.get_or_create_asset(b"STD")
    assert b"STD" in registry
    assert b"XYZ" not in registry