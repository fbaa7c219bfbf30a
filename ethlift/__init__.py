"""EthLift: diff local Solidity sources against explorer-verified code."""

__version__ = "0.1.0"
