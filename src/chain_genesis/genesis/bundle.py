"""The immutable genesis bundle.

Holds the ordered module groups (stdlib, framework, then caller-supplied
packages), the initial objects and the genesis transaction context.
Build one with :class:`~chain_genesis.genesis.builder.GenesisBuilder`;
direct construction is meant for tests and round-trip checks.

Persisted forms
---------------
* human-readable: a JSON document, one base64 string per module
* binary: a MessagePack document, one raw byte string per module

Both carry the same three top-level fields.  Decoding must use the mode
the bundle was encoded with.
"""

from __future__ import annotations

import json
from typing import Any

import msgpack
from pydantic import (
    BaseModel,
    FieldSerializationInfo,
    ValidationError,
    ValidationInfo,
    field_serializer,
    field_validator,
)

from chain_genesis.core.enums import EncodingMode
from chain_genesis.core.errors import DecodeError
from chain_genesis.core.models import CompiledModule, GenesisObject, TxContext
from chain_genesis.genesis.codec import (
    ENCODING_MODE_KEY,
    decode_groups,
    encode_groups,
    mode_for,
)


class GenesisBundle(BaseModel):
    """Immutable genesis artifact.

    Two bundles are equal iff all three fields are equal, including the
    order of module groups, of modules within each group, and of objects.
    """

    module_groups: tuple[tuple[CompiledModule, ...], ...]
    objects: tuple[GenesisObject, ...]
    genesis_context: TxContext

    model_config = {"frozen": True}

    # -- pydantic hooks ----------------------------------------------------

    @field_serializer("module_groups")
    def _serialize_module_groups(
        self,
        groups: tuple[tuple[CompiledModule, ...], ...],
        info: FieldSerializationInfo,
    ) -> list[list[Any]]:
        return encode_groups(groups, mode_for(info))

    @field_validator("module_groups", mode="plain")
    @classmethod
    def _validate_module_groups(
        cls, value: Any, info: ValidationInfo,
    ) -> tuple[tuple[CompiledModule, ...], ...]:
        return decode_groups(value, mode_for(info))

    # -- accessors ---------------------------------------------------------

    def modules(self) -> tuple[tuple[CompiledModule, ...], ...]:
        return self.module_groups

    def genesis_ctx(self) -> TxContext:
        return self.genesis_context

    def summary(self) -> dict[str, Any]:
        """Short description used by ``chain-genesis inspect``."""
        return {
            "groups": [
                [m.name for m in group] for group in self.module_groups
            ],
            "module_count": sum(len(g) for g in self.module_groups),
            "object_count": len(self.objects),
            "genesis_context": self.genesis_context.model_dump(),
        }

    # -- persistence -------------------------------------------------------

    def dump(self, mode: EncodingMode) -> str | bytes:
        """Serialize in the given mode (JSON text or MessagePack bytes)."""
        if mode is EncodingMode.HUMAN_READABLE:
            return self.to_json()
        return self.to_bytes()

    @classmethod
    def load(cls, data: str | bytes, mode: EncodingMode) -> GenesisBundle:
        """Inverse of :meth:`dump`; ``mode`` must match the one used there."""
        if mode is EncodingMode.HUMAN_READABLE:
            return cls.from_json(data)
        return cls.from_bytes(data)

    def to_json(self, indent: int | None = None) -> str:
        payload = self._payload(EncodingMode.HUMAN_READABLE, "json")
        return json.dumps(payload, indent=indent)

    def to_bytes(self) -> bytes:
        payload = self._payload(EncodingMode.BINARY, "python")
        return msgpack.packb(payload, use_bin_type=True)

    @classmethod
    def from_json(cls, text: str | bytes) -> GenesisBundle:
        if not isinstance(text, (str, bytes, bytearray)):
            raise DecodeError(
                f"JSON bundle must be text, got {type(text).__name__}"
            )
        # Codec errors raised inside the module_groups validator are not
        # ValueErrors, so pydantic lets them through unchanged.
        try:
            return cls.model_validate_json(
                text,
                context={ENCODING_MODE_KEY: EncodingMode.HUMAN_READABLE.value},
            )
        except ValueError as exc:
            raise DecodeError(f"invalid JSON bundle: {exc}") from exc

    @classmethod
    def from_bytes(cls, data: bytes) -> GenesisBundle:
        if not isinstance(data, (bytes, bytearray)):
            raise DecodeError(
                f"binary bundle must be bytes, got {type(data).__name__}"
            )
        try:
            payload = msgpack.unpackb(data, raw=False)
        except (ValueError, TypeError, msgpack.exceptions.UnpackException) as exc:
            raise DecodeError(f"bundle is not valid MessagePack: {exc}") from exc
        return cls._from_payload(payload, EncodingMode.BINARY)

    def _payload(self, mode: EncodingMode, dump_mode: str) -> dict[str, Any]:
        # Module groups go through the codec directly so codec errors
        # keep their group/module position.
        rest = self.model_dump(mode=dump_mode, exclude={"module_groups"})
        return {
            "module_groups": encode_groups(self.module_groups, mode),
            "objects": rest["objects"],
            "genesis_context": rest["genesis_context"],
        }

    @classmethod
    def _from_payload(cls, payload: Any, mode: EncodingMode) -> GenesisBundle:
        if not isinstance(payload, dict):
            raise DecodeError(
                f"bundle document must be a map, got {type(payload).__name__}"
            )
        try:
            return cls.model_validate(
                payload, context={ENCODING_MODE_KEY: mode.value},
            )
        except ValidationError as exc:
            raise DecodeError(f"invalid bundle document: {exc}") from exc
