"""Tests for the health check endpoint."""

import pytest
from unittest.mock import patch

from api.health import handler
from src.tools.registry import TOOLS
from src.utils.config import AgentConfig
from tests.utils.assertions import assert_valid_response
from tests.utils.helpers import create_vercel_request


@pytest.mark.unit
def test_health_reports_served_tools():
    with patch.object(AgentConfig, "MCP_SERVER_NAME", "agency-test-server"):
        response = handler(create_vercel_request(method="GET", path="/api/health", body=""))

    payload = assert_valid_response(response, 200)
    assert payload["status"] == "ok"
    assert payload["service"] == "agency-agent-backend"
    assert payload["mcp_server"] == "agency-test-server"
    assert payload["tool_count"] == len(TOOLS)
    assert "schedule_visit" in payload["tools"]
    assert payload["store"] == {"configured": True, "service_role": True}


@pytest.mark.unit
def test_health_is_degraded_without_store_config():
    with patch.object(AgentConfig, "SUPABASE_URL", None):
        response = handler(create_vercel_request(path="/api/health"))

    payload = assert_valid_response(response, 503)
    assert payload["status"] == "degraded"
    assert payload["store"]["configured"] is False
