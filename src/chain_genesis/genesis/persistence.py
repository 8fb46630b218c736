"""Save and load genesis bundles on disk.

The encoding mode is picked from the file suffix unless given:
``.json`` is human-readable, ``.bin`` / ``.msgpack`` / ``.blob`` binary.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from chain_genesis.core.enums import EncodingMode
from chain_genesis.core.errors import ConfigError, DecodeError
from chain_genesis.core.file_io import atomic_write_bytes
from chain_genesis.core.models import GenesisObject
from chain_genesis.genesis.bundle import GenesisBundle

logger = logging.getLogger(__name__)

_SUFFIX_MODES: dict[str, EncodingMode] = {
    ".json": EncodingMode.HUMAN_READABLE,
    ".bin": EncodingMode.BINARY,
    ".msgpack": EncodingMode.BINARY,
    ".blob": EncodingMode.BINARY,
}

_OBJECT_LIST = TypeAdapter(list[GenesisObject])


def mode_from_suffix(path: str | Path) -> EncodingMode:
    suffix = Path(path).suffix.lower()
    try:
        return _SUFFIX_MODES[suffix]
    except KeyError:
        raise ConfigError(
            f"Cannot infer bundle encoding from '{path}'; "
            f"use one of {sorted(_SUFFIX_MODES)} or pass a mode"
        ) from None


def save_bundle(
    bundle: GenesisBundle,
    path: str | Path,
    mode: EncodingMode | None = None,
) -> Path:
    """Serialize *bundle* to *path*.  Returns the written path."""
    path = Path(path)
    mode = mode or mode_from_suffix(path)

    if mode is EncodingMode.HUMAN_READABLE:
        data = bundle.to_json(indent=2).encode("utf-8")
    else:
        data = bundle.to_bytes()
    atomic_write_bytes(path, data)
    logger.info("Saved genesis bundle to %s (%s, %d bytes)", path, mode.value, len(data))
    return path


def load_bundle(path: str | Path, mode: EncodingMode | None = None) -> GenesisBundle:
    """Read a bundle written by :func:`save_bundle` with the same mode."""
    path = Path(path)
    mode = mode or mode_from_suffix(path)

    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ConfigError(f"Cannot read bundle file {path}: {exc}") from exc
    if mode is EncodingMode.HUMAN_READABLE:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"{path} is not UTF-8 text: {exc}") from exc
        bundle = GenesisBundle.from_json(text)
    else:
        bundle = GenesisBundle.from_bytes(data)
    logger.info("Loaded genesis bundle from %s (%s)", path, mode.value)
    return bundle


def load_objects(path: str | Path) -> list[GenesisObject]:
    """Read initial objects from a JSON array (``contents`` as base64)."""
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ConfigError(f"Cannot read objects file {path}: {exc}") from exc
    try:
        return _OBJECT_LIST.validate_json(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid objects file {path}: {exc}") from exc
