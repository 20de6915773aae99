"""Root conftest — shared fixtures for discovery tests."""

import pytest

from tests.module_tree import RecordingLoader, RecordingTarget


@pytest.fixture
def recording_loader():
    return RecordingLoader()


@pytest.fixture
def recording_target():
    return RecordingTarget()
