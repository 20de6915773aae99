"""Version Table — tests for registration, overwrite and freezing.

Tests cover:
    - Later registration of the same (base_path, version) wins and reports the replaced file
    - sorted_versions orders default first then numerically
    - Base paths keep first-registration order
    - freeze() blocks further registration
"""

from pathlib import Path

import pytest

from endurance.core.domain_types import DEFAULT_VERSION, RouteRegistration
from endurance.core.errors import VersionTableFrozenError
from endurance.core.version_table import VersionTable


def _reg(base, version, name):
    return RouteRegistration(base, version, Path(name))


def test_last_writer_wins():
    table = VersionTable()
    assert table.register(_reg("/a", "2", "first.py")) is None
    replaced = table.register(_reg("/a", "2", "second.py"))
    assert replaced == Path("first.py")
    assert table.sorted_versions("/a") == [("2", Path("second.py"))]
    assert len(table) == 1


def test_sorted_versions_default_then_numeric():
    table = VersionTable()
    table.register(_reg("/b", "10", "b10.py"))
    table.register(_reg("/b", "2", "b2.py"))
    table.register(_reg("/b", DEFAULT_VERSION, "b.py"))
    assert [v for v, _ in table.sorted_versions("/b")] == [DEFAULT_VERSION, "2", "10"]


def test_base_paths_keep_insertion_order():
    table = VersionTable()
    table.register(_reg("/z", "1", "z.py"))
    table.register(_reg("/a", "1", "a.py"))
    assert table.base_paths() == ["/z", "/a"]
    assert "/z" in table
    assert "/missing" not in table


def test_registrations_flatten_in_mount_order():
    table = VersionTable()
    table.register(_reg("/a", "3", "a3.py"))
    table.register(_reg("/a", DEFAULT_VERSION, "a.py"))
    assert [r.version for r in table.registrations()] == [DEFAULT_VERSION, "3"]


def test_frozen_table_rejects_registration():
    table = VersionTable()
    table.freeze()
    assert table.frozen
    with pytest.raises(VersionTableFrozenError):
        table.register(_reg("/a", "1", "a.py"))


def test_unknown_base_path_has_no_versions():
    assert VersionTable().sorted_versions("/nope") == []
