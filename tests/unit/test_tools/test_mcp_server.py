"""Tests for the MCP server tool wrappers."""

import pytest
from unittest.mock import patch
from src.tools import mcp_server
from src.tools.registry import TOOLS


@pytest.mark.unit
@pytest.mark.asyncio
async def test_every_registry_tool_is_exposed():
    tools = await mcp_server.mcp.list_tools()

    assert {tool.name for tool in tools} == set(TOOLS)
    for tool in tools:
        assert tool.description == TOOLS[tool.name].description


@pytest.mark.unit
@pytest.mark.asyncio
async def test_wrapper_drops_unset_arguments(seeded_gateway, agency_id):
    """Unset optional parameters fall back to the input model defaults."""
    with patch("src.tools.registry.get_query_gateway", return_value=seeded_gateway):
        result = await mcp_server.list_properties(agency_id=agency_id)

    assert result["ok"] is True
    assert result["data"]["limit"] == 20
    assert result["data"]["total"] == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_wrapper_returns_error_payload(seeded_gateway, agency_id):
    with patch("src.tools.registry.get_query_gateway", return_value=seeded_gateway):
        result = await mcp_server.get_contract(id="missing", agency_id=agency_id)

    assert result["ok"] is False
    assert result["error"]["error_type"] == "not_found"
