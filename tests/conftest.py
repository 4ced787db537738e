"""Shared fixtures and helpers for tests."""

from __future__ import annotations

import asyncio
import json
import stat
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest

from tubemap_server.errors import ToolInvocationError
from tubemap_server.settings import Settings

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Sample vg data
# ---------------------------------------------------------------------------

SAMPLE_GRAPH: dict[str, Any] = {
    "node": [
        {"id": "1", "sequence": "ACGT"},
        {"id": "2", "sequence": "G"},
        {"id": "3", "sequence": "TTAC"},
    ],
    "edge": [{"from": "1", "to": "2"}, {"from": "2", "to": "3"}],
    "path": [
        {"name": "chr22", "mapping": [{"position": {"node_id": "1"}, "rank": "1"}]},
        {"name": "thread_0", "mapping": [{"position": {"node_id": "2"}, "rank": "1"}]},
        {"name": "thread_1", "mapping": [{"position": {"node_id": "3"}, "rank": "1"}]},
    ],
}

SAMPLE_ANNOTATION = "chr22\t1\nthread_0   3\nthread_1\t0.25\n"

SAMPLE_REGIONS = "chr22\t1000\t1500\n"

SAMPLE_GAM = (
    json.dumps({"name": "read1", "sequence": "ACGTG", "path": {"mapping": []}})
    + "\n"
    + json.dumps({"name": "read2", "sequence": "GTTAC", "mapping_quality": 60})
    + "\n"
)


def _arg_after(args: Sequence[str], flag: str) -> str:
    return args[list(args).index(flag) + 1]


def _write(path: Path, content: str | bytes) -> None:
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")


class ScriptedToolchain:
    """In-process stand-in for ``VgToolchain`` that mimics vg's side effects."""

    def __init__(
        self,
        graph: dict[str, Any] | None = None,
        annotation: str | bytes | None = SAMPLE_ANNOTATION,
        regions: str | bytes | None = SAMPLE_REGIONS,
        gam: str | bytes = SAMPLE_GAM,
        raw_output: bytes | None = None,
        pipe_error: ToolInvocationError | None = None,
        delay: float = 0.0,
    ) -> None:
        self.graph = SAMPLE_GRAPH if graph is None else graph
        self.annotation = annotation
        self.regions = regions
        self.gam = gam
        self.raw_output = raw_output
        self.pipe_error = pipe_error
        self.delay = delay
        self.calls: list[list[str]] = []
        self.workspaces: list[Path] = []

    def available(self) -> bool:
        return True

    async def pipe(
        self,
        producer_args: Sequence[str],
        consumer_args: Sequence[str],
        *,
        request_id: str = "-",
    ) -> bytes:
        self.calls.append(list(producer_args))
        self.calls.append(list(consumer_args))
        prefix = Path(_arg_after(producer_args, "-b"))
        self.workspaces.append(prefix.parent)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.pipe_error is not None:
            raise self.pipe_error
        if self.annotation is not None:
            _write(Path(f"{prefix}_0_chr22_1000_1500.annotate.txt"), self.annotation)
        if self.regions is not None:
            _write(Path(_arg_after(producer_args, "-E")), self.regions)
        if "-a" in producer_args:
            Path(f"{prefix}_0_chr22_1000_1500.gam").write_bytes(b"binary")
        if self.raw_output is not None:
            return self.raw_output
        return json.dumps(self.graph).encode()

    async def run(
        self,
        args: Sequence[str],
        *,
        request_id: str = "-",
        error: type[ToolInvocationError] = ToolInvocationError,
    ) -> bytes:
        self.calls.append(list(args))
        if args and args[0] == "paths":
            return b"chr22\nthread_0\n\n"
        return self.gam if isinstance(self.gam, bytes) else self.gam.encode()


# ---------------------------------------------------------------------------
# Scripted vg executable for integration tests
# ---------------------------------------------------------------------------

_FAKE_VG_SOURCE = '''
import json
import os
import sys
import time


def after(args, flag):
    return args[args.index(flag) + 1]


def main():
    args = sys.argv[1:]
    with open(os.environ["FAKE_VG_CONFIG"], encoding="utf-8") as fh:
        config = json.load(fh)
    with open(os.environ["FAKE_VG_LOG"], "a", encoding="utf-8") as fh:
        fh.write(json.dumps(args) + "\\n")

    command = args[0] if args else ""
    if command == "chunk":
        time.sleep(config.get("chunk_sleep", 0))
        prefix = after(args, "-b")
        if config.get("annotation") is not None:
            with open(prefix + "_0.annotate.txt", "w", encoding="utf-8") as fh:
                fh.write(config["annotation"])
        if config.get("regions") is not None:
            with open(after(args, "-E"), "w", encoding="utf-8") as fh:
                fh.write(config["regions"])
        if "-a" in args and config.get("gam") is not None:
            with open(prefix + "_0.gam", "w", encoding="utf-8") as fh:
                fh.write(config["gam"])
        sys.stderr.write("chunking " + " ".join(args) + "\\n")
        sys.stdout.write(config.get("graph", ""))
        sys.stdout.flush()
        return config.get("chunk_exit", 0)
    if command == "view" and "-a" in args:
        with open(after(args, "-a"), encoding="utf-8") as fh:
            sys.stdout.write(fh.read())
        return config.get("gam_view_exit", 0)
    if command == "view":
        sys.stdout.write(sys.stdin.read())
        return config.get("view_exit", 0)
    if command == "paths":
        sys.stdout.write("".join(name + "\\n" for name in config.get("paths", [])))
        return config.get("paths_exit", 0)
    sys.stderr.write("unknown command\\n")
    return 1


sys.exit(main())
'''


class FakeVg:
    """A scripted ``vg`` executable driven by a JSON scenario file."""

    def __init__(self, root: Path) -> None:
        self.executable = root / "vg"
        self.config_path = root / "fake_vg.json"
        self.log_path = root / "fake_vg.log"
        self.executable.write_text(f"#!{sys.executable}\n{_FAKE_VG_SOURCE}", encoding="utf-8")
        self.executable.chmod(self.executable.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        self.configure()

    def configure(self, **scenario: Any) -> None:
        defaults: dict[str, Any] = {
            "graph": json.dumps(SAMPLE_GRAPH),
            "annotation": SAMPLE_ANNOTATION,
            "regions": SAMPLE_REGIONS,
            "gam": SAMPLE_GAM,
        }
        defaults.update(scenario)
        self.config_path.write_text(json.dumps(defaults), encoding="utf-8")

    def calls(self) -> list[list[str]]:
        if not self.log_path.exists():
            return []
        return [json.loads(line) for line in self.log_path.read_text(encoding="utf-8").splitlines() if line]


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    mounted = tmp_path / "mountedData"
    internal = tmp_path / "internalData"
    workspaces = tmp_path / "workspaces"
    for directory in (mounted, internal, workspaces):
        directory.mkdir()
    return Settings(
        vg_path=str(tmp_path / "vg"),
        mounted_data_dir=mounted,
        internal_data_dir=internal,
        workspace_root=workspaces,
        request_timeout=10.0,
        static_dir=None,
    )


@pytest.fixture
def toolchain() -> ScriptedToolchain:
    return ScriptedToolchain()


@pytest.fixture
def fake_vg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> FakeVg:
    vg = FakeVg(tmp_path)
    monkeypatch.setenv("FAKE_VG_CONFIG", str(vg.config_path))
    monkeypatch.setenv("FAKE_VG_LOG", str(vg.log_path))
    return vg


def leftover_workspaces(settings: Settings) -> list[Path]:
    return sorted(settings.workspace_root.glob("tmp-*"))
