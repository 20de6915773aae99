"""Version Table — accumulator of route registrations, keyed by base path and version.

Invariants:
    - At most one file per (base_path, version); a later register() overwrites (last writer wins)
    - Ordering is computed on read, never at insertion
    - Base paths keep first-registration order
    - After freeze(), register() raises VersionTableFrozenError
"""

from pathlib import Path

from endurance.core.domain_types import RouteRegistration
from endurance.core.errors import VersionTableFrozenError
from endurance.core.extract_version import sort_versions


class VersionTable:
    """base_path → {version → route file}."""

    def __init__(self) -> None:
        self._routes: dict[str, dict[str, Path]] = {}
        self._frozen = False

    def register(self, registration: RouteRegistration) -> Path | None:
        """Record a route file; returns the file it replaced, if any."""
        if self._frozen:
            raise VersionTableFrozenError(registration.base_path)
        versions = self._routes.setdefault(registration.base_path, {})
        previous = versions.get(registration.version)
        versions[registration.version] = registration.file_path
        return previous

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def base_paths(self) -> list[str]:
        return list(self._routes)

    def sorted_versions(self, base_path: str) -> list[tuple[str, Path]]:
        """(version, file) pairs for base_path, default first then numeric-aware."""
        versions = self._routes.get(base_path, {})
        return [(v, versions[v]) for v in sort_versions(versions)]

    def registrations(self) -> list[RouteRegistration]:
        return [
            RouteRegistration(base_path, version, file_path)
            for base_path in self._routes
            for version, file_path in self.sorted_versions(base_path)
        ]

    def __len__(self) -> int:
        return sum(len(v) for v in self._routes.values())

    def __contains__(self, base_path: object) -> bool:
        return base_path in self._routes
