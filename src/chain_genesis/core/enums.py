"""Enumerations used across genesis assembly."""

from enum import Enum


class EncodingMode(str, Enum):
    """Target format of a serialization pass.

    ``HUMAN_READABLE`` carries compiled modules as base64 text,
    ``BINARY`` as raw bytes.
    """

    BINARY = "binary"
    HUMAN_READABLE = "human_readable"


class BundleFormat(str, Enum):
    """On-disk bundle format, as chosen on the command line."""

    JSON = "json"
    BINARY = "binary"

    @property
    def encoding_mode(self) -> EncodingMode:
        if self is BundleFormat.JSON:
            return EncodingMode.HUMAN_READABLE
        return EncodingMode.BINARY


class GroupSource(str, Enum):
    """Where a module group comes from during build."""

    STDLIB = "stdlib"
    FRAMEWORK = "framework"
