from __future__ import annotations

from tubemap_server.core.ports.toolchain import GraphToolchain
from tubemap_server.core.toolchain import VgToolchain
from tubemap_server.settings import Settings
from tubemap_server.settings import get_settings as _get_settings


def get_settings() -> Settings:
    return _get_settings()


def get_toolchain() -> GraphToolchain:
    """Return a ``vg`` toolchain bound to the configured executable."""
    return VgToolchain(_get_settings().vg_path)
