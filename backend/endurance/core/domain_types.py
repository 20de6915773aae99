"""Domain Types — value objects shared by the walker, loader and mounter.

Invariants:
    - All value objects are frozen dataclasses (created once per discovery pass)
    - UnitKind is derived from file name and folder name only, never from content
    - DEFAULT_VERSION sorts before every numeric version

Design Decisions:
    - str Enums: serialize in log records and OpenAPI extensions without custom encoders
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


DEFAULT_VERSION = "default"


class UnitKind(str, Enum):
    """Role of a file inside a module tree."""
    MIDDLEWARE = "middleware"
    LISTENER = "listener"
    CONSUMER = "consumer"
    CRON = "cron"
    ROUTE = "route"
    STATIC = "static"
    IGNORED = "ignored"


class Phase(str, Enum):
    """The two global load phases, in execution order."""
    MIDDLEWARE = "middleware"
    CONTENT = "content"


# Loaded as soon as the content phase reaches them.
IMMEDIATE_KINDS = frozenset({UnitKind.LISTENER, UnitKind.CONSUMER, UnitKind.CRON})


@dataclass(frozen=True)
class ModuleDescriptor:
    """An installed third-party module and where its files come from."""
    name: str
    content_root: Path
    local_override_root: Path


@dataclass(frozen=True)
class DiscoveredUnit:
    """A classified file, after override resolution."""
    kind: UnitKind
    resolved_path: Path
    module_name: str


@dataclass(frozen=True)
class RouteRegistration:
    base_path: str
    version: str
    file_path: Path


@dataclass(frozen=True)
class MountedRoute:
    """A version of a base path as it ends up in the application."""
    mount_path: str
    base_path: str
    version: str
    file_path: Path
    fallback_to: str | None = None
