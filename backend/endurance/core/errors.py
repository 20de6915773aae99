"""Error Hierarchy — typed, categorized exceptions for discovery and mounting failures.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Discovery errors (ScanError, LoadError) are logged and never abort startup
    - Ordering errors (PhaseOrderError, VersionTableFrozenError) are programming errors and raise
    - to_response() never includes file contents or tracebacks

Design Decisions:
    - Single hierarchy with EnduranceError base: one FastAPI handler catches all
    - ErrorContext as dataclass: carries unit path and module name for log records
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DISCOVERY = "discovery"
    LOADING = "loading"
    ORDERING = "ordering"
    HTTP = "http"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Where the failure happened, for log records."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    unit_path: str | None = None
    module_name: str | None = None
    debug_info: dict[str, Any] | None = None


class EnduranceError(Exception):
    """Base exception for all Endurance errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            }
        }


# ─── Discovery Errors (logged, never fatal) ─────────────────────

class ScanError(EnduranceError):
    """A directory could not be listed."""
    def __init__(self, path: Path, cause: OSError, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.unit_path = str(path)
        super().__init__(
            f"Cannot read directory {path}: {cause}",
            "SCAN_ERROR", ErrorCategory.DISCOVERY,
            ErrorSeverity.WARNING, ctx,
        )
        self.path = path
        self.cause = cause


class LoadError(EnduranceError):
    """A unit's top-level code raised or failed to evaluate."""
    def __init__(
        self,
        path: Path,
        cause: BaseException | None = None,
        message: str | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.unit_path = str(path)
        super().__init__(
            message or f"Error loading unit {path}: {cause!r}",
            "LOAD_ERROR", ErrorCategory.LOADING,
            ErrorSeverity.ERROR, ctx,
        )
        self.path = path
        self.cause = cause

    @property
    def causes(self) -> list[BaseException]:
        return [self.cause] if self.cause is not None else []


class AggregateLoadError(LoadError):
    """A unit failed with several underlying causes (an ExceptionGroup)."""
    def __init__(
        self, path: Path, group: BaseExceptionGroup, context: ErrorContext | None = None,
    ):
        super().__init__(
            path, group,
            f"Error loading unit {path}: {len(group.exceptions)} errors",
            context,
        )
        self.code = "AGGREGATE_LOAD_ERROR"
        self.group = group

    @property
    def causes(self) -> list[BaseException]:
        return _flatten(self.group)


class RouterNotFoundError(LoadError):
    """A route unit loaded but exposes neither `router` nor `get_router()`."""
    def __init__(self, path: Path, context: ErrorContext | None = None):
        super().__init__(
            path, None,
            f"Route unit {path} exposes neither 'router' nor 'get_router()'",
            context,
        )
        self.code = "ROUTER_NOT_FOUND"


# ─── Ordering Errors (raised) ───────────────────────────────────

class PhaseOrderError(EnduranceError):
    """A phase was entered before the previous one closed."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "PHASE_ORDER_VIOLATION", ErrorCategory.ORDERING,
            ErrorSeverity.CRITICAL, context,
        )


class VersionTableFrozenError(EnduranceError):
    """Registration attempted after the route table was frozen."""
    def __init__(self, base_path: str, context: ErrorContext | None = None):
        super().__init__(
            f"Route table is frozen; cannot register {base_path}",
            "VERSION_TABLE_FROZEN", ErrorCategory.ORDERING,
            ErrorSeverity.CRITICAL, context,
        )
        self.base_path = base_path


def _flatten(group: BaseExceptionGroup) -> list[BaseException]:
    causes: list[BaseException] = []
    for exc in group.exceptions:
        if isinstance(exc, BaseExceptionGroup):
            causes.extend(_flatten(exc))
        else:
            causes.append(exc)
    return causes
