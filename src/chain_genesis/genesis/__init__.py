"""Genesis bundle model, module codec, builder and persistence."""

from chain_genesis.genesis.builder import GenesisBuilder
from chain_genesis.genesis.bundle import GenesisBundle
from chain_genesis.genesis.codec import decode_module, encode_module
from chain_genesis.genesis.persistence import load_bundle, save_bundle

__all__ = [
    "GenesisBuilder",
    "GenesisBundle",
    "decode_module",
    "encode_module",
    "load_bundle",
    "save_bundle",
]
