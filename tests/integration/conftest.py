"""Fixtures for integration tests that drive a scripted ``vg`` executable."""

import pytest

from tests.conftest import FakeVg
from tubemap_server.core.toolchain import VgToolchain


@pytest.fixture
def vg_toolchain(fake_vg: FakeVg) -> VgToolchain:
    """Real subprocess toolchain pointed at the scripted executable."""
    return VgToolchain(str(fake_vg.executable))
