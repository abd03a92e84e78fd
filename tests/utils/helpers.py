"""Test helper functions."""

import json
from typing import Any, Dict, Optional


def create_tool_call(tool: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Create a tool invocation body."""
    return {"tool": tool, "arguments": arguments or {}}


def create_vercel_request(
    method: str = "POST",
    path: str = "/api/tools/invoke",
    body: Any = None,
    headers: Dict[str, str] = None
) -> Dict[str, Any]:
    """Create a Vercel request object for testing."""
    if body is None:
        body = create_tool_call("list_properties")

    if headers is None:
        headers = {
            "content-type": "application/json"
        }

    return {
        "method": method,
        "path": path,
        "headers": headers,
        "body": json.dumps(body) if isinstance(body, dict) else body,
        "query": {}
    }
