"""Dual-mode codec for compiled modules.

A compiled module is always reduced to its native binary layout first.
In ``BINARY`` mode those bytes are emitted as-is; in ``HUMAN_READABLE``
mode they are wrapped in standard-alphabet base64 text.  The mode is not
stored with the data, so encode and decode must agree on it.

The group-of-groups structure around the modules is an ordinary ordered
list; the codec is only substituted at the leaves.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Iterable, Sequence
from typing import Any

from chain_genesis.core.enums import EncodingMode
from chain_genesis.core.errors import CodecError, DecodeError, EncodeError
from chain_genesis.core.models import CompiledModule

# Key callers may put in a pydantic ``context`` to force a mode.
ENCODING_MODE_KEY = "encoding_mode"


def encode_module(module: CompiledModule, mode: EncodingMode) -> bytes | str:
    """Encode one module for the given mode."""
    try:
        raw = module.serialize()
    except EncodeError:
        raise
    except Exception as exc:
        raise EncodeError(str(exc)) from exc

    if mode is EncodingMode.HUMAN_READABLE:
        return base64.b64encode(raw).decode("ascii")
    return raw


def decode_module(representation: Any, mode: EncodingMode) -> CompiledModule:
    """Decode one module previously produced by :func:`encode_module`."""
    if mode is EncodingMode.HUMAN_READABLE:
        if not isinstance(representation, str):
            raise DecodeError(
                f"expected base64 text, got {type(representation).__name__}"
            )
        try:
            raw = base64.b64decode(representation.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError) as exc:
            raise DecodeError(f"malformed base64: {exc}") from exc
        # Spare bits of the final character must be zero.
        if base64.b64encode(raw).decode("ascii") != representation:
            raise DecodeError("non-canonical base64")
    else:
        if not isinstance(representation, (bytes, bytearray, memoryview)):
            raise DecodeError(
                f"expected raw bytes, got {type(representation).__name__}"
            )
        raw = bytes(representation)

    return CompiledModule.deserialize(raw)


def encode_groups(
    groups: Iterable[Iterable[CompiledModule]],
    mode: EncodingMode,
) -> list[list[bytes | str]]:
    """Encode every module of every group, preserving both orders."""
    out: list[list[bytes | str]] = []
    for gi, group in enumerate(groups):
        encoded: list[bytes | str] = []
        for mi, module in enumerate(group):
            try:
                encoded.append(encode_module(module, mode))
            except CodecError as exc:
                raise exc.at(gi, mi) from exc
        out.append(encoded)
    return out


def decode_groups(
    raw: Any,
    mode: EncodingMode,
) -> tuple[tuple[CompiledModule, ...], ...]:
    """Decode a group-of-groups structure.

    ``CompiledModule`` instances found at a leaf are kept as-is, which is
    what in-process construction of a bundle passes in.
    """
    if not _is_sequence(raw):
        raise DecodeError(f"module groups must be a list, got {type(raw).__name__}")

    groups: list[tuple[CompiledModule, ...]] = []
    for gi, group in enumerate(raw):
        if not _is_sequence(group):
            raise DecodeError(
                f"module group {gi} must be a list, got {type(group).__name__}"
            )
        modules: list[CompiledModule] = []
        for mi, leaf in enumerate(group):
            if isinstance(leaf, CompiledModule):
                modules.append(leaf)
                continue
            try:
                modules.append(decode_module(leaf, mode))
            except CodecError as exc:
                raise exc.at(gi, mi) from exc
        groups.append(tuple(modules))
    return tuple(groups)


def mode_for(info: Any) -> EncodingMode:
    """Resolve the encoding mode of a pydantic (de)serialization pass.

    An explicit ``context={"encoding_mode": ...}`` wins.  Otherwise JSON
    passes are human-readable and python passes are binary.
    """
    context = getattr(info, "context", None) or {}
    explicit = context.get(ENCODING_MODE_KEY)
    if explicit is not None:
        return EncodingMode(explicit)

    mode_is_json = getattr(info, "mode_is_json", None)
    if callable(mode_is_json):
        is_json = mode_is_json()
    else:
        is_json = getattr(info, "mode", "python") == "json"
    return EncodingMode.HUMAN_READABLE if is_json else EncodingMode.BINARY


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(
        value, (str, bytes, bytearray)
    )
