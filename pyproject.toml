[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stdpallets"
version = "0.1.0"
description = "In-memory models of an asset registry, an automated market maker and a cross-chain bridge voting ledger."
requires-python = ">=3.10"
dependencies = []
keywords = ["amm", "liquidity", "bridge", "asset-registry", "ledger"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["stdpallets"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
