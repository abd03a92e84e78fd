"""Health check endpoint (Vercel serverless function)."""

import json
from src.tools.registry import TOOLS
from src.utils.config import AgentConfig

SERVICE_NAME = "agency-agent-backend"


def health_payload() -> dict:
    """Report what this deployment serves; `degraded` when the store is not configured."""
    store_configured = bool(AgentConfig.SUPABASE_URL and AgentConfig.supabase_key())
    return {
        "status": "ok" if store_configured else "degraded",
        "service": SERVICE_NAME,
        "mcp_server": AgentConfig.MCP_SERVER_NAME,
        "tool_count": len(TOOLS),
        "tools": sorted(TOOLS),
        "store": {
            "configured": store_configured,
            "service_role": AgentConfig.is_service_role(),
        },
    }


def handler(request):
    """Answer GET and POST alike; no store round trip."""
    payload = health_payload()
    return {
        "statusCode": 200 if payload["status"] == "ok" else 503,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(payload),
    }
