"""Module Registry — discovers installed third-party modules and their content roots.

Invariants:
    - Modules are directories named `<prefix>*`, directly or under a `<namespace_prefix>*` directory
    - Namespaced modules are named `<namespace>/<module>`
    - Registry order is name order (root entries first-level sorted, namespaced entries sorted within)
    - content_root = <module>/<build_subdir> when it is a directory, else the module root
    - local_override_root = <local_modules_dir>/<name segments>
    - A missing dependency directory yields no modules; an unreadable one is logged
"""

import logging
from pathlib import Path

from endurance.core.domain_types import ModuleDescriptor
from endurance.core.errors import ScanError
from endurance.services.walk_modules import list_directory

logger = logging.getLogger(__name__)


def discover_modules(
    dependency_dir: Path,
    local_modules_dir: Path,
    prefix: str = "edrm-",
    namespace_prefix: str = "@",
    build_subdir: str = "dist",
) -> list[ModuleDescriptor]:
    """Return one descriptor per prefix-marked module under dependency_dir."""
    if not dependency_dir.is_dir():
        logger.info(f"No dependency directory at {dependency_dir}")
        return []

    entries: list[tuple[str, Path]] = []
    for entry in _safe_list(dependency_dir):
        if not entry.is_dir():
            continue
        if entry.name.startswith(prefix):
            entries.append((entry.name, entry))
        elif namespace_prefix and entry.name.startswith(namespace_prefix):
            for scoped in _safe_list(entry):
                if scoped.name.startswith(prefix) and scoped.is_dir():
                    entries.append((f"{entry.name}/{scoped.name}", scoped))

    modules = [
        _describe(name, path, local_modules_dir, build_subdir)
        for name, path in entries
    ]
    for module in modules:
        logger.info(
            f"Registered module {module.name} from {module.content_root}",
            extra={"module_name": module.name},
        )
    return modules


def _describe(
    name: str, path: Path, local_modules_dir: Path, build_subdir: str,
) -> ModuleDescriptor:
    build_dir = path / build_subdir
    content_root = build_dir if build_subdir and build_dir.is_dir() else path
    return ModuleDescriptor(
        name=name,
        content_root=content_root,
        local_override_root=local_modules_dir.joinpath(*name.split("/")),
    )


def _safe_list(directory: Path) -> list[Path]:
    try:
        return list_directory(directory)
    except ScanError as e:
        logger.warning(e.message, extra={"unit_path": str(directory), "error_code": e.code})
        return []


def local_project_root(project_root: Path, build_subdir: str = "dist") -> Path:
    """`<project>/<build_subdir>/modules` when built, else `<project>/src/modules`."""
    built = project_root / build_subdir / "modules"
    if built.is_dir():
        return built
    return project_root / "src" / "modules"
