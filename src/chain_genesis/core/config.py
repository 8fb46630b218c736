"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from .enums import BundleFormat


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"


class GenesisSettings(BaseSettings):
    """Inputs and output of a ``chain-genesis build`` run.

    Loaded from a TOML config file, overridden by ``GENESIS_*`` env vars.
    """

    stdlib_path: str = ""  # package dir of the standard library
    framework_path: str = ""  # package dir of the framework
    module_dirs: list[str] = Field(default_factory=list)  # extra packages, in order
    objects_path: str = ""  # JSON array of initial objects
    output_path: str = "genesis.json"
    format: BundleFormat = BundleFormat.JSON

    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "GENESIS_", "env_nested_delimiter": "__"}

    def require_sources(self) -> None:
        """Fail early when a library source path is missing."""
        from .errors import ConfigError

        missing = [
            name for name, value in (
                ("stdlib_path", self.stdlib_path),
                ("framework_path", self.framework_path),
            )
            if not value
        ]
        if missing:
            raise ConfigError(
                f"Missing required setting(s): {', '.join(missing)} "
                "(set in the config file or GENESIS_* environment variables)"
            )


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> GenesisSettings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            with open(path, "rb") as f:
                data = tomli.load(f)

    if overrides:
        data.update(overrides)

    return GenesisSettings(**data)
