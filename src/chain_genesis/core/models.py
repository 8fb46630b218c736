"""Core value types carried by a genesis bundle.

These stand in for the chain's own types: compiled bytecode modules,
initial on-chain objects and the genesis transaction context.  All of
them are frozen pydantic models, compared field by field.

Compiled module binary layout
-----------------------------
::

    magic        4 bytes   A1 1C EB 0B
    version      u32 LE
    name_len     ULEB128
    name         UTF-8
    code_len     ULEB128
    code         raw bytes
    checksum     u32 LE    CRC-32 of every preceding byte

The trailing checksum means any corrupted byte fails ``deserialize``
instead of yielding a different module.
"""

from __future__ import annotations

import re
import struct
import zlib

from pydantic import BaseModel, field_validator

from .errors import DecodeError, EncodeError

MODULE_MAGIC = bytes.fromhex("a11ceb0b")
SUPPORTED_VERSIONS = range(1, 7)  # 1..6 inclusive

_U32 = struct.Struct("<I")
_HEX_ID = re.compile(r"^0x[0-9a-f]+$")

# 32-byte zero address / digest used for genesis attribution.
ZERO_ADDRESS = "0x" + "00" * 32
GENESIS_DIGEST = "00" * 32


# ---------------------------------------------------------------------------
# ULEB128 helpers
# ---------------------------------------------------------------------------

def _write_uleb128(value: int) -> bytes:
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _read_uleb128(data: bytes, offset: int) -> tuple[int, int]:
    """Return (value, new_offset)."""
    value = 0
    shift = 0
    while True:
        if offset >= len(data):
            raise DecodeError("truncated ULEB128 length")
        byte = data[offset]
        offset += 1
        value |= (byte & 0x7F) << shift
        if not byte & 0x80:
            return value, offset
        shift += 7
        if shift > 63:
            raise DecodeError("ULEB128 length overflows 64 bits")


def _normalize_hex_id(v: str, field: str) -> str:
    v = v.lower()
    if not _HEX_ID.match(v):
        raise ValueError(f"{field} must be 0x-prefixed hex, got '{v}'")
    return v


# ---------------------------------------------------------------------------
# Compiled module
# ---------------------------------------------------------------------------

class CompiledModule(BaseModel):
    """An already-validated unit of bytecode, handled as a whole."""

    name: str
    version: int
    code: bytes

    model_config = {
        "frozen": True,
        "ser_json_bytes": "base64",
        "val_json_bytes": "base64",
    }

    def serialize(self) -> bytes:
        """Lay the module out in its native binary form."""
        if not self.name:
            raise EncodeError("module name must not be empty")
        if self.version not in SUPPORTED_VERSIONS:
            raise EncodeError(
                f"module '{self.name}' has unsupported bytecode version {self.version}"
            )
        name = self.name.encode("utf-8")
        body = b"".join((
            MODULE_MAGIC,
            _U32.pack(self.version),
            _write_uleb128(len(name)),
            name,
            _write_uleb128(len(self.code)),
            self.code,
        ))
        return body + _U32.pack(zlib.crc32(body))

    @classmethod
    def deserialize(cls, data: bytes) -> CompiledModule:
        """Parse the native binary form produced by :meth:`serialize`."""
        data = bytes(data)
        if len(data) < len(MODULE_MAGIC) + 2 * _U32.size:
            raise DecodeError(f"bytecode too short ({len(data)} bytes)")
        if data[:4] != MODULE_MAGIC:
            raise DecodeError(f"bad module magic {data[:4].hex()}")

        body, trailer = data[:-_U32.size], data[-_U32.size:]
        (expected,) = _U32.unpack(trailer)
        if zlib.crc32(body) != expected:
            raise DecodeError("module checksum mismatch")

        (version,) = _U32.unpack_from(body, 4)
        if version not in SUPPORTED_VERSIONS:
            raise DecodeError(f"unsupported bytecode version {version}")

        offset = 4 + _U32.size
        name_len, offset = _read_uleb128(body, offset)
        if name_len == 0 or offset + name_len > len(body):
            raise DecodeError("bad module name length")
        try:
            name = body[offset:offset + name_len].decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"module name is not UTF-8: {exc}") from exc
        offset += name_len

        code_len, offset = _read_uleb128(body, offset)
        if offset + code_len != len(body):
            raise DecodeError(
                f"code length {code_len} does not match remaining "
                f"{len(body) - offset} bytes"
            )
        return cls(name=name, version=version, code=body[offset:])


# ---------------------------------------------------------------------------
# Initial objects and context
# ---------------------------------------------------------------------------

class GenesisObject(BaseModel):
    """An on-chain object created at genesis."""

    object_id: str  # 0x-prefixed hex
    version: int
    owner: str  # 0x-prefixed address
    type_tag: str  # e.g. "0x2::coin::Coin<0x2::sui::SUI>"
    contents: bytes

    model_config = {
        "frozen": True,
        "ser_json_bytes": "base64",
        "val_json_bytes": "base64",
    }

    @field_validator("object_id")
    @classmethod
    def object_id_must_be_hex(cls, v: str) -> str:
        return _normalize_hex_id(v, "object_id")

    @field_validator("owner")
    @classmethod
    def owner_must_be_hex(cls, v: str) -> str:
        return _normalize_hex_id(v, "owner")

    @field_validator("version")
    @classmethod
    def version_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"object version must be non-negative, got {v}")
        return v


class TxContext(BaseModel):
    """Transaction context that attributes genesis-created entities."""

    sender: str
    digest: str  # 64 hex chars
    ids_created: int

    model_config = {"frozen": True}

    @field_validator("sender")
    @classmethod
    def sender_must_be_hex(cls, v: str) -> str:
        return _normalize_hex_id(v, "sender")

    @field_validator("digest")
    @classmethod
    def digest_must_be_32_bytes(cls, v: str) -> str:
        v = v.lower()
        if not re.fullmatch(r"[0-9a-f]{64}", v):
            raise ValueError(f"digest must be 64 hex chars, got '{v}'")
        return v


def default_genesis_context() -> TxContext:
    """Fresh context: zero-address sender, all-zero genesis digest."""
    return TxContext(sender=ZERO_ADDRESS, digest=GENESIS_DIGEST, ids_created=0)


class ValidatorEntry(BaseModel):
    """A (public key, stake) pair queued on the builder."""

    public_key: bytes
    stake: int

    model_config = {"frozen": True}

    @field_validator("stake")
    @classmethod
    def stake_must_be_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"stake must be non-negative, got {v}")
        return v
