"""Custom exception hierarchy for genesis assembly."""

from __future__ import annotations


class GenesisError(Exception):
    """Base exception for all genesis errors."""


# --- Configuration ---
class ConfigError(GenesisError):
    """Invalid or missing configuration."""


# --- Build ---
class BuildError(GenesisError):
    """Genesis bundle could not be assembled."""


class SourceMissing(BuildError):
    """A required module-group source path was never set."""

    def __init__(self, source: str):
        self.source = source
        super().__init__(
            f"No {source} source path set; call set_{source}_source() before build()"
        )


class LoadFailure(BuildError):
    """The module loader could not produce a module group from a path."""

    def __init__(self, path: object, reason: str, source: str = ""):
        self.path = path
        self.reason = reason
        self.source = source
        where = f"{source} group at {path}" if source else str(path)
        super().__init__(f"Failed to load {where}: {reason}")


class BuilderConsumed(BuildError):
    """The builder was already finalised by build()."""


# --- Codec ---
class CodecError(GenesisError):
    """Module encoding or decoding error."""

    def __init__(
        self,
        message: str,
        group_index: int | None = None,
        module_index: int | None = None,
    ):
        self.message = message
        self.group_index = group_index
        self.module_index = module_index
        if group_index is not None and module_index is not None:
            message = f"group {group_index}, module {module_index}: {message}"
        super().__init__(message)

    def at(self, group_index: int, module_index: int) -> CodecError:
        """Return a copy of this error tagged with its position."""
        return type(self)(self.message, group_index, module_index)


class EncodeError(CodecError):
    """A compiled module's native serializer failed."""


class DecodeError(CodecError):
    """Malformed base64, bytecode or bundle document."""
