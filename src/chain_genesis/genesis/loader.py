"""Filesystem module loader.

A package directory holds one ``*.mv`` file per compiled module.  Module
order inside a group is its dependency order: taken from a
``modules.txt`` manifest when present, otherwise from sorted file names.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from chain_genesis.core.errors import DecodeError, LoadFailure
from chain_genesis.core.models import CompiledModule

logger = logging.getLogger(__name__)

MODULE_SUFFIX = ".mv"
MANIFEST_NAME = "modules.txt"


class ModuleLoader(Protocol):
    """Path in, ordered module group out.  Raises ``LoadFailure``."""

    def __call__(self, path: Path) -> list[CompiledModule]: ...


def load_module_group(path: str | Path) -> list[CompiledModule]:
    """Load every compiled module of the package at *path*, in order."""
    path = Path(path)
    if not path.is_dir():
        raise LoadFailure(path, "not a directory")

    files = _module_files(path)
    if not files:
        raise LoadFailure(path, f"no {MODULE_SUFFIX} files found")

    modules: list[CompiledModule] = []
    for file in files:
        try:
            data = file.read_bytes()
        except OSError as exc:
            raise LoadFailure(path, f"cannot read {file.name}: {exc}") from exc
        try:
            modules.append(CompiledModule.deserialize(data))
        except DecodeError as exc:
            raise LoadFailure(path, f"malformed bytecode in {file.name}: {exc}") from exc

    logger.debug("Loaded %d modules from %s", len(modules), path)
    return modules


def write_module_group(path: str | Path, modules: Sequence[CompiledModule]) -> list[Path]:
    """Write *modules* as a package directory readable by ``load_module_group``.

    Files are numbered so sorted order matches the given order, and a
    manifest is written alongside.
    """
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    for i, module in enumerate(modules):
        file = path / f"{i:03d}_{module.name}{MODULE_SUFFIX}"
        file.write_bytes(module.serialize())
        written.append(file)
    (path / MANIFEST_NAME).write_text(
        "".join(f"{f.name}\n" for f in written), encoding="utf-8",
    )
    return written


def _module_files(path: Path) -> list[Path]:
    manifest = path / MANIFEST_NAME
    if not manifest.exists():
        return sorted(
            p for p in path.iterdir()
            if p.is_file() and p.suffix == MODULE_SUFFIX
        )

    try:
        lines = manifest.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise LoadFailure(path, f"cannot read {MANIFEST_NAME}: {exc}") from exc

    files = []
    for line in lines:
        name = line.strip()
        if not name or name.startswith("#"):
            continue
        file = path / name
        if not file.is_file():
            raise LoadFailure(path, f"{MANIFEST_NAME} lists missing file {name}")
        files.append(file)
    return files
