"""Unit Loader — turns a discovered file into an executed Python module.

Invariants:
    - load() either returns a LoadedUnit or raises LoadError (never a bare exception)
    - An ExceptionGroup raised by a unit becomes AggregateLoadError
    - A unit's optional setup(context) runs right after its top-level code, awaited if async
    - A unit that fails is removed from sys.modules
    - SystemExit raised by a unit is a load failure, never a process exit

Design Decisions:
    - UnitLoader is a Protocol so ordering tests can substitute a fake loader
    - Each file gets a unique module name derived from its path: same stem in two modules never collides
"""

import hashlib
import importlib.util
import inspect
import logging
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Protocol

from endurance.core.errors import AggregateLoadError, LoadError

logger = logging.getLogger(__name__)

UNIT_MODULE_PREFIX = "_endurance_unit"


@dataclass
class UnitContext:
    """Handed to a unit's setup(context)."""
    app: Any = None
    emitter: Any = None
    settings: Any = None


@dataclass
class LoadedUnit:
    path: Path
    module: Any


class UnitLoader(Protocol):
    async def load(self, path: Path) -> LoadedUnit:
        ...


class PythonUnitLoader:
    """Loads `.py` units by path with importlib."""

    def __init__(self, context: UnitContext | None = None):
        self.context = context or UnitContext()

    async def load(self, path: Path) -> LoadedUnit:
        if path.suffix != ".py":
            raise LoadError(path, message=f"Unsupported unit file type '{path.suffix}': {path}")
        name = unit_module_name(path)
        try:
            module = self._exec(name, path)
            setup = getattr(module, "setup", None)
            if callable(setup):
                result = setup(self.context)
                if inspect.isawaitable(result):
                    await result
        except LoadError:
            sys.modules.pop(name, None)
            raise
        except BaseExceptionGroup as group:
            sys.modules.pop(name, None)
            raise AggregateLoadError(path, group) from group
        except (Exception, SystemExit) as e:
            sys.modules.pop(name, None)
            raise LoadError(path, e) from e
        logger.debug(f"Loaded unit {path}", extra={"unit_path": str(path)})
        return LoadedUnit(path, module)

    @staticmethod
    def _exec(name: str, path: Path) -> ModuleType:
        spec = importlib.util.spec_from_file_location(name, path)
        if spec is None or spec.loader is None:
            raise LoadError(path, message=f"Cannot create import spec for {path}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[name] = module
        spec.loader.exec_module(module)
        return module


def log_load_error(error: LoadError, **extra: Any) -> None:
    """Log a failed unit: one record for the path, one per underlying cause."""
    record = {"unit_path": str(error.path), "error_code": error.code, **extra}
    logger.error(f"Error loading unit {error.path}", extra=record)
    if not error.causes:
        logger.error(error.message, extra=record)
    for cause in error.causes:
        logger.error(
            f"{type(cause).__name__}: {cause}",
            extra=record,
            exc_info=(type(cause), cause, cause.__traceback__),
        )


def unit_module_name(path: Path) -> str:
    """Stable, unique import name for a unit file."""
    digest = hashlib.sha1(str(path.resolve()).encode()).hexdigest()[:10]
    stem = re.sub(r"\W", "_", path.name.split(".")[0])
    return f"{UNIT_MODULE_PREFIX}_{stem}_{digest}"
