"""Version Resolver & Mounter — loads route units and mounts them per version with fallbacks.

Invariants:
    - Runs only after the content phase closed; freezes the VersionTable before the first load
    - Versions of a base path mount in order: default first, then numeric-aware
    - Default mounts at `{base_path}`, others at `/v{version}{base_path}`
    - Every mounted version after the first gets one fallback hop to the previous mounted version
    - A route unit that fails to load is logged and skipped; its siblings still mount
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from endurance.core.domain_types import MountedRoute, Phase
from endurance.core.errors import LoadError, RouterNotFoundError
from endurance.core.extract_version import mount_path
from endurance.core.phase_barrier import PhaseBarrier
from endurance.core.version_table import VersionTable
from endurance.services.unit_loader import LoadedUnit, UnitLoader, log_load_error

logger = logging.getLogger(__name__)


class MountTarget(Protocol):
    """What the core needs from the HTTP application."""

    def include(self, path: str, router: Any) -> None:
        ...

    def add_fallback(self, path: str, previous_path: str) -> None:
        ...

    def serve_static(self, folder: Path) -> None:
        ...


@dataclass
class MountReport:
    mounted: list[MountedRoute] = field(default_factory=list)
    failed: list[Path] = field(default_factory=list)

    @property
    def route_files(self) -> list[Path]:
        return [route.file_path for route in self.mounted]

    @property
    def mount_paths(self) -> list[str]:
        return [route.mount_path for route in self.mounted]


def resolve_router(unit: LoadedUnit) -> Any:
    """The unit's `router`, or the result of its `get_router()`."""
    router = getattr(unit.module, "router", None)
    if router is not None:
        return router
    get_router = getattr(unit.module, "get_router", None)
    if callable(get_router):
        try:
            router = get_router()
        except Exception as e:
            raise LoadError(unit.path, e) from e
    if router is None:
        raise RouterNotFoundError(unit.path)
    return router


class RouteMounter:
    def __init__(self, loader: UnitLoader, target: MountTarget):
        self.loader = loader
        self.target = target

    async def mount_all(self, table: VersionTable, barrier: PhaseBarrier) -> MountReport:
        barrier.require_closed(Phase.CONTENT)
        table.freeze()

        report = MountReport()
        for base_path in table.base_paths():
            previous: str | None = None
            for version, file_path in table.sorted_versions(base_path):
                path = mount_path(base_path, version)
                try:
                    await self._mount(path, file_path)
                except LoadError as e:
                    log_load_error(e, base_path=base_path, version=version)
                    report.failed.append(file_path)
                    continue
                if previous is not None:
                    self.target.add_fallback(path, previous)
                report.mounted.append(MountedRoute(path, base_path, version, file_path, previous))
                logger.info(
                    f"Mounted {file_path.name} at {path}"
                    + (f" (falls back to {previous})" if previous else ""),
                    extra={"base_path": base_path, "version": version},
                )
                previous = path
        return report

    async def _mount(self, path: str, file_path: Path) -> None:
        unit = await self.loader.load(file_path)
        router = resolve_router(unit)
        try:
            self.target.include(path, router)
        except TypeError as e:
            raise LoadError(file_path, e) from e
