"""Runtime configuration for EthLift, resolved from the environment."""

from __future__ import annotations

import os

# Legacy (Brownie) convention
LEGACY_CONFIG_FILENAME = "brownie-config.yml"
LEGACY_CONFIG_FRAGMENT = "brownie-config"
LEGACY_PACKAGES_DIR = os.path.join(".brownie", "packages")
LEGACY_REMAPPINGS_KEY = ("compiler", "solc", "remappings")

# Native (Foundry) convention
NATIVE_CONFIG_FILENAME = "foundry.toml"
NATIVE_REMAPPINGS_FILENAME = "remappings.txt"
NATIVE_DEFAULT_LIBS = ["lib"]
FOUNDRY_PROFILE = os.environ.get("FOUNDRY_PROFILE", "default")

# Unified multichain explorer endpoint; the chain is selected per request via ``chainid``
ETHERSCAN_API_URL = os.environ.get("ETHLIFT_ETHERSCAN_URL", "https://api.etherscan.io/v2/api")
ETHERSCAN_API_KEY = os.environ.get("ETHERSCAN_API_KEY", "")
HTTP_TIMEOUT = float(os.environ.get("ETHLIFT_HTTP_TIMEOUT", "30"))

DEFAULT_CHAIN_ID = 1
