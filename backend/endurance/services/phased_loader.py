"""Phased Loader — loads every middleware everywhere, then everything else, then hands routes over.

Invariants:
    - Middleware phase: only MIDDLEWARE units are loaded, module order then local tree
    - Content phase opens only after the middleware phase closed (PhaseBarrier)
    - Content phase: LISTENER/CONSUMER/CRON loaded, STATIC served, ROUTE registered (never loaded here)
    - Every load is awaited before the next begins
    - A failing unit is logged and skipped; the phase always runs to completion
    - Route collisions: last registration wins (module order, then local tree), logged as a warning

Design Decisions:
    - Units are collected in one walk and filtered per phase; same order as walking twice
    - The VersionTable is a local accumulator returned in DiscoveryResult, never module state
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from endurance.core.classify_file import strip_role
from endurance.core.domain_types import (
    IMMEDIATE_KINDS, DiscoveredUnit, ModuleDescriptor, Phase, RouteRegistration, UnitKind,
)
from endurance.core.errors import LoadError
from endurance.core.extract_version import extract_version
from endurance.core.phase_barrier import PhaseBarrier
from endurance.core.version_table import VersionTable
from endurance.services.route_mounter import MountTarget
from endurance.services.unit_loader import UnitLoader, log_load_error
from endurance.services.walk_modules import LOCAL_MODULE, walk

logger = logging.getLogger(__name__)


@dataclass
class DiscoveryResult:
    """What the two phases produced; routes are registered but not yet loaded."""
    units: list[DiscoveredUnit]
    version_table: VersionTable
    barrier: PhaseBarrier
    loaded: list[Path] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)
    static_folders: list[Path] = field(default_factory=list)


def collect_units(
    modules: Sequence[ModuleDescriptor], local_root: Path | None,
) -> list[DiscoveredUnit]:
    """Walk every module (registry order), then the local tree."""
    units: list[DiscoveredUnit] = []
    for module in modules:
        logger.info(f"Walking module {module.name}", extra={"module_name": module.name})
        units.extend(walk(module.content_root, module.local_override_root, module.name))
    if local_root is not None:
        units.extend(walk(local_root, None, LOCAL_MODULE))
    return units


class PhasedLoader:
    def __init__(self, loader: UnitLoader, target: MountTarget):
        self.loader = loader
        self.target = target

    async def run(self, units: Sequence[DiscoveredUnit]) -> DiscoveryResult:
        result = DiscoveryResult(list(units), VersionTable(), PhaseBarrier())

        result.barrier.enter(Phase.MIDDLEWARE)
        for unit in units:
            if unit.kind is UnitKind.MIDDLEWARE:
                await self._load(unit, Phase.MIDDLEWARE, result)
        result.barrier.close(Phase.MIDDLEWARE)

        result.barrier.enter(Phase.CONTENT)
        for unit in units:
            if unit.kind in IMMEDIATE_KINDS:
                await self._load(unit, Phase.CONTENT, result)
            elif unit.kind is UnitKind.STATIC:
                self.target.serve_static(unit.resolved_path)
                result.static_folders.append(unit.resolved_path)
            elif unit.kind is UnitKind.ROUTE:
                self._register_route(unit, result.version_table)
        result.barrier.close(Phase.CONTENT)

        logger.info(
            f"Loaded {len(result.loaded)} units, {len(result.failed)} failed, "
            f"{len(result.version_table)} routes registered",
        )
        return result

    async def _load(self, unit: DiscoveredUnit, phase: Phase, result: DiscoveryResult) -> None:
        try:
            await self.loader.load(unit.resolved_path)
        except LoadError as e:
            log_load_error(e, module_name=unit.module_name, phase=phase.value)
            result.failed.append(unit.resolved_path)
            return
        result.loaded.append(unit.resolved_path)

    @staticmethod
    def _register_route(unit: DiscoveredUnit, table: VersionTable) -> None:
        base_path, version = extract_version(strip_role(unit.resolved_path.name))
        replaced = table.register(RouteRegistration(base_path, version, unit.resolved_path))
        if replaced is not None and replaced != unit.resolved_path:
            logger.warning(
                f"Route {base_path} version {version} from {unit.resolved_path} "
                f"replaces {replaced}",
                extra={"base_path": base_path, "version": version, "module_name": unit.module_name},
            )


async def discover(
    modules: Sequence[ModuleDescriptor],
    local_root: Path | None,
    loader: UnitLoader,
    target: MountTarget,
) -> DiscoveryResult:
    """Walk modules then the local tree and run both phases; routes are left registered."""
    return await PhasedLoader(loader, target).run(collect_units(modules, local_root))
