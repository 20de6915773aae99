"""Error Hierarchy — tests for codes, causes and REST envelope.

Tests cover:
    - LoadError keeps path and single cause
    - AggregateLoadError flattens nested exception groups
    - RouterNotFoundError has no cause but a clear message
    - to_response() carries code, category, severity
"""

from pathlib import Path

from endurance.core.errors import (
    AggregateLoadError, ErrorCategory, LoadError, RouterNotFoundError, ScanError,
)


def test_load_error_keeps_path_and_cause():
    cause = ValueError("bad")
    err = LoadError(Path("/m/routes/a.router.py"), cause)
    assert err.path == Path("/m/routes/a.router.py")
    assert err.causes == [cause]
    assert err.code == "LOAD_ERROR"
    assert err.context.unit_path == "/m/routes/a.router.py"
    assert "/m/routes/a.router.py" in err.message


def test_aggregate_load_error_flattens_causes():
    a, b, c = ValueError("a"), KeyError("b"), RuntimeError("c")
    group = ExceptionGroup("outer", [a, ExceptionGroup("inner", [b, c])])
    err = AggregateLoadError(Path("x.py"), group)
    assert err.causes == [a, b, c]
    assert err.code == "AGGREGATE_LOAD_ERROR"
    assert isinstance(err, LoadError)


def test_router_not_found_has_no_cause():
    err = RouterNotFoundError(Path("a.router.py"))
    assert err.causes == []
    assert "router" in err.message


def test_scan_error_category():
    err = ScanError(Path("/locked"), PermissionError("denied"))
    assert err.category is ErrorCategory.DISCOVERY


def test_to_response_envelope():
    body = LoadError(Path("x.py"), ValueError("v")).to_response()
    assert body["error"]["code"] == "LOAD_ERROR"
    assert body["error"]["category"] == "loading"
    assert body["error"]["severity"] == "error"
