"""In-memory asset registry, automated market maker and chain bridge ledgers."""

__version__ = "0.1.0"

__all__ = [
    "amm_math",
    "asset_registry",
    "assets",
    "bridge_types",
    "chainbridge",
    "market",
]