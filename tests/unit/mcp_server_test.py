"""Tests for the MCP server tool definitions."""

from __future__ import annotations

import inspect

import pytest

from tests.conftest import ScriptedToolchain
from tubemap_server.api.schemas import ChunkRequest
from tubemap_server.mcp.server import create_mcp_server
from tubemap_server.settings import Settings


class TestMcpServerCreation:
    def test_creates_server(self, settings: Settings) -> None:
        server = create_mcp_server(ScriptedToolchain(), settings)
        assert server is not None
        assert server.name == "tubemap-server"

    def test_server_has_tools(self, settings: Settings) -> None:
        server = create_mcp_server(ScriptedToolchain(), settings)
        tool_names = {t.name for t in server._tool_manager._tools.values()}
        assert tool_names == {"extract_subgraph", "list_datasets", "list_path_names"}

    def test_extract_tool_defaults(self, settings: Settings) -> None:
        server = create_mcp_server(ScriptedToolchain(), settings)
        fn = server._tool_manager._tools["extract_subgraph"].fn  # type: ignore[attr-defined]
        sig = inspect.signature(fn)
        assert sig.parameters["gam_index"].default is None
        assert sig.parameters["by_node"].default is False

    def test_extract_tool_reads_same_directory_as_http_by_default(self, settings: Settings) -> None:
        server = create_mcp_server(ScriptedToolchain(), settings)
        fn = server._tool_manager._tools["extract_subgraph"].fn  # type: ignore[attr-defined]
        default = inspect.signature(fn).parameters["use_mounted_path"].default
        assert default is ChunkRequest.model_fields["use_mounted_path"].default


class TestMcpTools:
    @pytest.mark.asyncio
    async def test_extract_subgraph_returns_payload(self, settings: Settings) -> None:
        server = create_mcp_server(ScriptedToolchain(), settings)
        fn = server._tool_manager._tools["extract_subgraph"].fn  # type: ignore[attr-defined]

        payload = await fn(xg_file="chr22.xg", position=1000, distance=500, anchor_path="chr22")

        assert [p["name"] for p in payload["graph"]["path"]] == ["chr22", "thread_0", "thread_1"]
        assert payload["graph"]["path"][0]["indexOfFirstBase"] == 1000

    @pytest.mark.asyncio
    async def test_extract_subgraph_rejects_unsafe_name(self, settings: Settings) -> None:
        toolchain = ScriptedToolchain()
        server = create_mcp_server(toolchain, settings)
        fn = server._tool_manager._tools["extract_subgraph"].fn  # type: ignore[attr-defined]

        payload = await fn(xg_file="../x.xg", position=1, distance=1)

        assert payload["error"]["kind"] == "InvalidDataset"
        assert toolchain.calls == []

    @pytest.mark.asyncio
    async def test_extract_subgraph_reports_pipeline_error(self, settings: Settings) -> None:
        server = create_mcp_server(ScriptedToolchain(annotation=None), settings)
        fn = server._tool_manager._tools["extract_subgraph"].fn  # type: ignore[attr-defined]

        payload = await fn(xg_file="chr22.xg", position=1000, distance=500, anchor_path="chr22")

        assert payload["error"]["kind"] == "AnnotationMissing"
        assert payload["error"]["stage"] == "annotation_merging"

    @pytest.mark.asyncio
    async def test_list_datasets(self, settings: Settings) -> None:
        (settings.mounted_data_dir / "chr22.xg").write_text("")
        server = create_mcp_server(ScriptedToolchain(), settings)
        fn = server._tool_manager._tools["list_datasets"].fn  # type: ignore[attr-defined]

        assert await fn() == {"xgFiles": ["chr22.xg"], "gbwtFiles": [], "gamIndices": []}

    @pytest.mark.asyncio
    async def test_list_path_names(self, settings: Settings) -> None:
        server = create_mcp_server(ScriptedToolchain(), settings)
        fn = server._tool_manager._tools["list_path_names"].fn  # type: ignore[attr-defined]

        assert await fn(xg_file="chr22.xg") == ["chr22", "thread_0"]
        with pytest.raises(ValueError):
            await fn(xg_file="/etc/passwd")
