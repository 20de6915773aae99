"""Version Resolver & Mounter — tests for mount order, paths and fallbacks.

Tests cover:
    - Versions 2 and 10 mount in numeric order at /v2/a and /v10/a, /v10/a falls back to /v2/a
    - Default version mounts at the bare base path first; /v3/b falls back to /b
    - A failing route is excluded and logged with its path; siblings still mount
    - Fallback skips a failed predecessor
    - Units without a router are excluded
    - The table is frozen after mounting
    - Mounting is refused until the content phase has closed
"""

import logging
from pathlib import Path
from types import SimpleNamespace

import pytest

from endurance.core.domain_types import DEFAULT_VERSION, Phase, RouteRegistration
from endurance.core.errors import PhaseOrderError, RouterNotFoundError
from endurance.core.phase_barrier import PhaseBarrier
from endurance.core.version_table import VersionTable
from endurance.services.route_mounter import RouteMounter, resolve_router
from endurance.services.unit_loader import LoadedUnit

from tests.module_tree import RecordingLoader, completed_barrier


def _table(*entries):
    table = VersionTable()
    for base, version, name in entries:
        table.register(RouteRegistration(base, version, Path(f"/m/routes/{name}")))
    return table


async def _mount(loader, target, table):
    return await RouteMounter(loader, target).mount_all(table, completed_barrier())


@pytest.mark.asyncio
async def test_numeric_versions_mount_in_order(recording_target):
    table = _table(("/a", "10", "a.10.router.py"), ("/a", "2", "a.2.router.py"))
    report = await _mount(RecordingLoader(), recording_target, table)
    assert recording_target.included() == ["/v2/a", "/v10/a"]
    assert recording_target.fallbacks() == {"/v10/a": "/v2/a"}
    assert report.mount_paths == ["/v2/a", "/v10/a"]
    assert report.mounted[0].fallback_to is None
    assert report.mounted[1].fallback_to == "/v2/a"


@pytest.mark.asyncio
async def test_default_version_mounts_first_at_base_path(recording_target):
    table = _table(("/b", "3", "b.3.router.py"), ("/b", DEFAULT_VERSION, "b.router.py"))
    await _mount(RecordingLoader(), recording_target, table)
    assert recording_target.included() == ["/b", "/v3/b"]
    assert recording_target.fallbacks() == {"/v3/b": "/b"}


@pytest.mark.asyncio
async def test_fallback_precedes_nothing_for_single_version(recording_target):
    await _mount(RecordingLoader(), recording_target, _table(("/c", "1", "c.1.router.py")))
    assert recording_target.included() == ["/v1/c"]
    assert recording_target.fallbacks() == {}


@pytest.mark.asyncio
async def test_failing_route_excluded_sibling_mounts(recording_target, caplog):
    loader = RecordingLoader(failing=("a.10.router.py",))
    table = _table(("/a", "2", "a.2.router.py"), ("/a", "10", "a.10.router.py"))
    with caplog.at_level(logging.ERROR):
        report = await _mount(loader, recording_target, table)
    assert report.mount_paths == ["/v2/a"]
    assert report.failed == [Path("/m/routes/a.10.router.py")]
    assert "/m/routes/a.10.router.py" in caplog.text


@pytest.mark.asyncio
async def test_fallback_skips_failed_predecessor(recording_target):
    loader = RecordingLoader(failing=("a.2.router.py",))
    table = _table(
        ("/a", "1", "a.1.router.py"), ("/a", "2", "a.2.router.py"), ("/a", "3", "a.3.router.py"),
    )
    await _mount(loader, recording_target, table)
    assert recording_target.included() == ["/v1/a", "/v3/a"]
    assert recording_target.fallbacks() == {"/v3/a": "/v1/a"}


@pytest.mark.asyncio
async def test_loads_routes_in_mount_order(recording_target):
    loader = RecordingLoader()
    table = _table(
        ("/x", "2", "x.2.router.py"), ("/y", DEFAULT_VERSION, "y.router.py"),
        ("/x", DEFAULT_VERSION, "x.router.py"),
    )
    report = await _mount(loader, recording_target, table)
    assert loader.names() == ["x.router.py", "x.2.router.py", "y.router.py"]
    assert report.route_files == loader.calls


@pytest.mark.asyncio
async def test_table_is_frozen_after_mounting(recording_target):
    table = _table(("/a", "1", "a.1.router.py"))
    await _mount(RecordingLoader(), recording_target, table)
    assert table.frozen


@pytest.mark.asyncio
async def test_refuses_to_mount_while_content_phase_open(recording_target):
    barrier = PhaseBarrier()
    barrier.enter(Phase.MIDDLEWARE)
    barrier.close(Phase.MIDDLEWARE)
    barrier.enter(Phase.CONTENT)
    table = _table(("/a", "1", "a.1.router.py"))
    with pytest.raises(PhaseOrderError):
        await RouteMounter(RecordingLoader(), recording_target).mount_all(table, barrier)
    assert recording_target.events == []
    assert not table.frozen


@pytest.mark.asyncio
async def test_include_type_error_becomes_load_failure(caplog):
    class RejectingTarget:
        def include(self, path, router):
            raise TypeError("not a router")

        def add_fallback(self, path, previous_path):
            raise AssertionError("no fallback expected")

        def serve_static(self, folder):
            pass

    table = _table(("/a", "1", "a.1.router.py"))
    report = await _mount(RecordingLoader(), RejectingTarget(), table)
    assert report.mounted == []
    assert report.failed == [Path("/m/routes/a.1.router.py")]


# ─── resolve_router ──────────────────────────────────────────────

def test_resolve_router_prefers_attribute():
    router = object()
    unit = LoadedUnit(Path("a.py"), SimpleNamespace(router=router))
    assert resolve_router(unit) is router


def test_resolve_router_calls_factory():
    router = object()
    unit = LoadedUnit(Path("a.py"), SimpleNamespace(get_router=lambda: router))
    assert resolve_router(unit) is router


def test_resolve_router_missing():
    with pytest.raises(RouterNotFoundError):
        resolve_router(LoadedUnit(Path("a.py"), SimpleNamespace()))
