"""Assemble, persist and inspect blockchain genesis bundles."""

from chain_genesis.genesis import GenesisBuilder, GenesisBundle

__all__ = ["GenesisBuilder", "GenesisBundle"]
__version__ = "0.1.0"
