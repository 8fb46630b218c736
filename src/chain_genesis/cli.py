"""CLI entry point for genesis assembly."""

from __future__ import annotations

import json
import sys

import click

from .core.enums import BundleFormat
from .core.errors import GenesisError
from .observability.logger import get_logger, new_run_id, setup_logging

_FORMATS = click.Choice([f.value for f in BundleFormat])


@click.group()
@click.option("--log-level", default=None, help="Override log level (DEBUG, INFO, ...)")
@click.option("--log-format", default=None, type=click.Choice(["console", "json"]))
@click.pass_context
def main(ctx: click.Context, log_level: str | None, log_format: str | None) -> None:
    """Assemble and inspect genesis bundles."""
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    ctx.obj["log_format"] = log_format


@main.command()
@click.option("--config", default="configs/genesis.toml", help="Config file path")
@click.option("--stdlib", "stdlib_path", default=None, help="Standard library package dir")
@click.option("--framework", "framework_path", default=None, help="Framework package dir")
@click.option(
    "--module-dir", "module_dirs", multiple=True,
    help="Extra package dir, appended after the framework (repeatable)",
)
@click.option("--objects", "objects_path", default=None, help="JSON file of initial objects")
@click.option("--out", "output_path", default=None, help="Output bundle path")
@click.option("--format", "fmt", default=None, type=_FORMATS, help="Output encoding")
@click.pass_context
def build(
    ctx: click.Context,
    config: str,
    stdlib_path: str | None,
    framework_path: str | None,
    module_dirs: tuple[str, ...],
    objects_path: str | None,
    output_path: str | None,
    fmt: str | None,
) -> None:
    """Build a genesis bundle and write it to disk."""
    from .core.config import load_settings
    from .genesis.builder import GenesisBuilder
    from .genesis.loader import load_module_group
    from .genesis.persistence import load_objects, save_bundle

    overrides: dict = {}
    if stdlib_path:
        overrides["stdlib_path"] = stdlib_path
    if framework_path:
        overrides["framework_path"] = framework_path
    if module_dirs:
        overrides["module_dirs"] = list(module_dirs)
    if objects_path:
        overrides["objects_path"] = objects_path
    if output_path:
        overrides["output_path"] = output_path
    if fmt:
        overrides["format"] = fmt

    try:
        settings = load_settings(config_path=config, overrides=overrides)
        _configure_logging(ctx, settings.observability.log_level, settings.observability.log_format)
        log = get_logger(__name__)
        settings.require_sources()

        builder = (
            GenesisBuilder()
            .set_stdlib_source(settings.stdlib_path)
            .set_framework_source(settings.framework_path)
            .add_module_groups(load_module_group(d) for d in settings.module_dirs)
        )
        if settings.objects_path:
            builder.add_objects(load_objects(settings.objects_path))

        bundle = builder.build()
        path = save_bundle(bundle, settings.output_path, settings.format.encoding_mode)
    except GenesisError as exc:
        click.echo(f"error: {exc}", err=True)
        sys.exit(1)

    log.info("genesis_written", path=str(path), format=settings.format.value)
    click.echo(str(path))


@main.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--format", "fmt", default=None, type=_FORMATS, help="Bundle encoding")
@click.pass_context
def inspect(ctx: click.Context, path: str, fmt: str | None) -> None:
    """Print a summary of a saved genesis bundle."""
    from .genesis.persistence import load_bundle

    _configure_logging(ctx, "WARNING", "console")
    mode = BundleFormat(fmt).encoding_mode if fmt else None
    try:
        bundle = load_bundle(path, mode)
    except GenesisError as exc:
        click.echo(f"error: {exc}", err=True)
        sys.exit(1)

    click.echo(json.dumps(bundle.summary(), indent=2))


def _configure_logging(ctx: click.Context, level: str, fmt: str) -> None:
    opts = ctx.obj or {}
    new_run_id()
    setup_logging(
        level=opts.get("log_level") or level,
        format=opts.get("log_format") or fmt,
    )
