"""Filesystem Walker — depth-first discovery of units with local override resolution.

Invariants:
    - Entries are visited in name order (identical trees → identical unit sequences)
    - Per directory: middleware files, then route files, then other units, then subdirectories
    - Each directory level is the union of the base and override listings; an entry present
      in both resolves to the override (file for file, directory for directory)
    - Classification uses the folder name, which is the same on both sides
    - An unreadable directory is logged (ScanError) and treated as empty
    - A `public` folder yields one STATIC unit for its whole subtree; it is never descended into

Design Decisions:
    - Override root is extended level by level alongside the walk, so overrides mirror module layout
    - Units and subdirectories that exist only under the override root are added
"""

import logging
from pathlib import Path

from endurance.core.classify_file import classify, is_skipped_directory, is_static_folder
from endurance.core.domain_types import DiscoveredUnit, UnitKind
from endurance.core.errors import ScanError

logger = logging.getLogger(__name__)

LOCAL_MODULE = "local"


def resolve_override(base_dir: Path, override_dir: Path | None, name: str) -> Path:
    """Physical path for `name`: the override when it exists, else the base entry.

    A file overrides a file and a directory overrides a directory; when the two
    disagree on the entry type the base entry is kept.
    """
    base = base_dir / name
    if override_dir is None:
        return base
    candidate = override_dir / name
    if candidate.is_dir() and not base.is_file():
        return candidate
    if candidate.is_file() and not base.is_dir():
        return candidate
    return base


def walk(
    root: Path, override_root: Path | None = None, module_name: str = LOCAL_MODULE,
) -> list[DiscoveredUnit]:
    """Discover every non-ignored unit under root, in load order."""
    units: list[DiscoveredUnit] = []
    if not root.is_dir():
        logger.debug(f"Nothing to walk at {root}", extra={"module_name": module_name})
        return units
    _walk_directory(root, override_root, module_name, units)
    return units


def list_directory(directory: Path) -> list[Path]:
    """Sorted directory entries; raises ScanError when unreadable."""
    try:
        return sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise ScanError(directory, e)


def _entry_names(directory: Path, override_dir: Path | None, module_name: str) -> list[str]:
    names: set[str] = set()
    for source in (directory, override_dir):
        if source is None or not source.is_dir():
            continue
        try:
            names.update(entry.name for entry in list_directory(source))
        except ScanError as e:
            logger.warning(
                e.message,
                extra={"unit_path": str(source), "module_name": module_name, "error_code": e.code},
            )
    return sorted(names)


def _walk_directory(
    directory: Path,
    override_dir: Path | None,
    module_name: str,
    units: list[DiscoveredUnit],
) -> None:
    middlewares: list[DiscoveredUnit] = []
    routes: list[DiscoveredUnit] = []
    others: list[DiscoveredUnit] = []
    subdirectories: list[tuple[str, Path]] = []

    for name in _entry_names(directory, override_dir, module_name):
        resolved = resolve_override(directory, override_dir, name)
        if resolved.is_dir():
            if not is_skipped_directory(name):
                subdirectories.append((name, resolved))
            continue
        kind = classify(name, directory.name)
        if kind is UnitKind.IGNORED:
            continue
        unit = DiscoveredUnit(kind, resolved, module_name)
        if kind is UnitKind.MIDDLEWARE:
            middlewares.append(unit)
        elif kind is UnitKind.ROUTE:
            routes.append(unit)
        else:
            others.append(unit)

    units.extend(middlewares)
    units.extend(routes)
    units.extend(others)

    for name, resolved in subdirectories:
        if is_static_folder(name):
            units.append(DiscoveredUnit(UnitKind.STATIC, resolved, module_name))
            continue
        base = directory / name
        if base.is_dir():
            sub_override = override_dir / name if override_dir is not None else None
            _walk_directory(base, sub_override, module_name, units)
        else:
            # only the override has this directory
            _walk_directory(resolved, None, module_name, units)
