"""Fluent builder that assembles a :class:`GenesisBundle`.

Usage::

    bundle = (
        GenesisBuilder()
        .set_stdlib_source("build/MoveStdlib/bytecode_modules")
        .set_framework_source("build/Framework/bytecode_modules")
        .add_module_groups([custom_modules])
        .add_objects(initial_objects)
        .build()
    )

All methods except ``build()`` only record inputs.  ``build()`` loads the
stdlib and framework groups, orders every group as
``[stdlib, framework, *custom]`` and returns the bundle.  A builder is
single-use: after ``build()`` (successful or not) it rejects further calls.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from chain_genesis.core.enums import GroupSource
from chain_genesis.core.errors import (
    BuilderConsumed,
    GenesisError,
    LoadFailure,
    SourceMissing,
)
from chain_genesis.core.models import (
    CompiledModule,
    GenesisObject,
    TxContext,
    ValidatorEntry,
    default_genesis_context,
)
from chain_genesis.genesis.bundle import GenesisBundle
from chain_genesis.genesis.loader import ModuleLoader, load_module_group

logger = logging.getLogger(__name__)


class GenesisBuilder:
    """Accumulates genesis inputs for one ``build()`` pass.

    Parameters
    ----------
    loader:
        Turns a package directory into an ordered module group.
    context_provider:
        Supplies the genesis context when none was set explicitly.
    """

    def __init__(
        self,
        loader: ModuleLoader = load_module_group,
        context_provider: Callable[[], TxContext] = default_genesis_context,
    ) -> None:
        self._loader = loader
        self._context_provider = context_provider

        self._stdlib_path: Path | None = None
        self._framework_path: Path | None = None
        self._custom_groups: list[tuple[CompiledModule, ...]] = []
        self._objects: list[GenesisObject] = []
        self._genesis_ctx: TxContext | None = None
        self._validators: list[ValidatorEntry] = []
        self._consumed = False

    # ------------------------------------------------------------------
    # Accumulation
    # ------------------------------------------------------------------

    def set_framework_source(self, path: str | Path) -> GenesisBuilder:
        self._check_open()
        self._framework_path = Path(path)
        return self

    def set_stdlib_source(self, path: str | Path) -> GenesisBuilder:
        self._check_open()
        self._stdlib_path = Path(path)
        return self

    def add_module_groups(
        self, groups: Iterable[Iterable[CompiledModule]],
    ) -> GenesisBuilder:
        """Append caller-supplied groups; they follow stdlib and framework.

        Raises ``TypeError`` if an entry is not a ``CompiledModule``.
        """
        self._check_open()
        added = [tuple(group) for group in groups]
        for gi, group in enumerate(added):
            for mi, module in enumerate(group):
                if not isinstance(module, CompiledModule):
                    raise TypeError(
                        f"module group {gi}, entry {mi}: expected CompiledModule, "
                        f"got {type(module).__name__}"
                    )
        self._custom_groups.extend(added)
        return self

    def add_object(self, obj: GenesisObject) -> GenesisBuilder:
        self._check_open()
        self._objects.append(obj)
        return self

    def add_objects(self, objects: Iterable[GenesisObject]) -> GenesisBuilder:
        self._check_open()
        self._objects.extend(objects)
        return self

    def set_genesis_context(self, context: TxContext) -> GenesisBuilder:
        self._check_open()
        self._genesis_ctx = context
        return self

    def add_validator(self, public_key: bytes, stake: int) -> GenesisBuilder:
        """Queue a validator.

        The bundle schema has no validator set yet, so queued entries are
        reported and dropped by ``build()``.
        """
        self._check_open()
        self._validators.append(ValidatorEntry(public_key=public_key, stake=stake))
        return self

    @property
    def pending_validators(self) -> tuple[ValidatorEntry, ...]:
        return tuple(self._validators)

    @property
    def consumed(self) -> bool:
        return self._consumed

    # ------------------------------------------------------------------
    # Finalisation
    # ------------------------------------------------------------------

    def build(self) -> GenesisBundle:
        """Load the library groups and assemble the bundle.

        Raises
        ------
        SourceMissing
            The stdlib or framework path was never set.
        LoadFailure
            The loader could not produce one of the library groups.
        BuilderConsumed
            ``build()`` was already called on this builder.
        """
        self._check_open()
        self._consumed = True

        if self._stdlib_path is None:
            raise SourceMissing(GroupSource.STDLIB.value)
        if self._framework_path is None:
            raise SourceMissing(GroupSource.FRAMEWORK.value)

        stdlib = self._load_group(GroupSource.STDLIB, self._stdlib_path)
        framework = self._load_group(GroupSource.FRAMEWORK, self._framework_path)

        module_groups = [stdlib, framework, *self._custom_groups]

        genesis_ctx = self._genesis_ctx
        if genesis_ctx is None:
            genesis_ctx = self._context_provider()

        if self._validators:
            logger.warning(
                "Ignoring %d pending validator(s) (total stake %d): "
                "the genesis bundle does not record a validator set",
                len(self._validators),
                sum(v.stake for v in self._validators),
            )

        bundle = GenesisBundle(
            module_groups=module_groups,
            objects=self._objects,
            genesis_context=genesis_ctx,
        )
        logger.info(
            "Built genesis bundle: %d module groups, %d modules, %d objects",
            len(bundle.module_groups),
            sum(len(g) for g in bundle.module_groups),
            len(bundle.objects),
        )
        return bundle

    def _load_group(
        self, source: GroupSource, path: Path,
    ) -> tuple[CompiledModule, ...]:
        logger.info("Loading %s lib from %s", source.value, path)
        try:
            modules = self._loader(path)
        except LoadFailure as exc:
            raise LoadFailure(path, exc.reason, source.value) from exc
        except (OSError, GenesisError) as exc:
            raise LoadFailure(path, str(exc), source.value) from exc

        if not modules:
            raise LoadFailure(path, "loader returned no modules", source.value)
        logger.info("Loaded %d %s modules", len(modules), source.value)
        return tuple(modules)

    def _check_open(self) -> None:
        if self._consumed:
            raise BuilderConsumed(
                "GenesisBuilder has already been built; create a new builder"
            )
