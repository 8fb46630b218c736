"""Shared fixtures for the chain-genesis test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from chain_genesis.core.models import (
    CompiledModule,
    GenesisObject,
    TxContext,
    default_genesis_context,
)
from chain_genesis.genesis.bundle import GenesisBundle
from chain_genesis.genesis.loader import write_module_group


def make_module(name: str, code: bytes | None = None, version: int = 6) -> CompiledModule:
    """Return a small compiled module whose code is derived from its name."""
    if code is None:
        code = name.encode() * 3 + bytes(range(8))
    return CompiledModule(name=name, version=version, code=code)


# ---------------------------------------------------------------------------
# Modules
# ---------------------------------------------------------------------------

@pytest.fixture
def mod_a() -> CompiledModule:
    return make_module("vector")


@pytest.fixture
def mod_b() -> CompiledModule:
    return make_module("option")


@pytest.fixture
def mod_c() -> CompiledModule:
    return make_module("coin")


@pytest.fixture
def mod_d() -> CompiledModule:
    return make_module("marketplace")


@pytest.fixture
def mod_e() -> CompiledModule:
    return make_module("auction")


@pytest.fixture
def stdlib_dir(tmp_path: Path, mod_a, mod_b) -> Path:
    """Package dir holding the stdlib group [A, B]."""
    path = tmp_path / "stdlib"
    write_module_group(path, [mod_a, mod_b])
    return path


@pytest.fixture
def framework_dir(tmp_path: Path, mod_c) -> Path:
    """Package dir holding the framework group [C]."""
    path = tmp_path / "framework"
    write_module_group(path, [mod_c])
    return path


# ---------------------------------------------------------------------------
# Objects and context
# ---------------------------------------------------------------------------

@pytest.fixture
def sample_objects() -> list[GenesisObject]:
    return [
        GenesisObject(
            object_id="0x" + "11" * 20,
            version=0,
            owner="0x" + "aa" * 20,
            type_tag="0x2::coin::Coin<0x2::sui::SUI>",
            contents=b"\x00\x01\x02\xff" * 4,
        ),
        GenesisObject(
            object_id="0x" + "22" * 20,
            version=3,
            owner="0x" + "bb" * 20,
            type_tag="0x2::object::Gas",
            contents=b"",
        ),
    ]


@pytest.fixture
def custom_context() -> TxContext:
    return TxContext(sender="0x" + "0c" * 32, digest="ab" * 32, ids_created=7)


@pytest.fixture
def sample_bundle(mod_a, mod_b, mod_c, mod_d, mod_e, sample_objects) -> GenesisBundle:
    """Bundle with groups [[A, B], [C], [D, E]] and two objects."""
    return GenesisBundle(
        module_groups=[[mod_a, mod_b], [mod_c], [mod_d, mod_e]],
        objects=sample_objects,
        genesis_context=default_genesis_context(),
    )


@pytest.fixture
def module_factory():
    """Return the ``make_module`` helper for tests that need extra modules."""
    return make_module
