"""Agent tool invocation endpoint (Vercel serverless function)."""

import json
import asyncio
from src.tools.registry import invoke_tool
from src.utils.logging_config import LoggingConfig
from src.utils.logging import get_structured_logger

LoggingConfig.setup_logging()
logger = get_structured_logger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


def _response(status_code: int, payload: dict) -> dict:
    return {
        "statusCode": status_code,
        "headers": JSON_HEADERS,
        "body": json.dumps(payload, default=str),
    }


def _parse_body(request: dict) -> dict:
    body = request.get("body") or {}
    if isinstance(body, (bytes, bytearray)):
        body = body.decode("utf-8")
    if isinstance(body, str):
        body = json.loads(body) if body.strip() else {}
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return body


def handler(request):
    """
    Invoke one agent tool.

    Expects a body of the form {"tool": "<name>", "arguments": {...}}.
    Tool failures are returned as {"ok": false, "error": {...}} with a 200;
    only malformed requests get a 400.
    """
    try:
        body = _parse_body(request)
    except ValueError as e:
        logger.warning("Malformed tool request", error=str(e))
        return _response(400, {
            "ok": False,
            "error": {"message": f"Malformed request: {e}", "error_type": "validation_error"},
        })

    tool = body.get("tool")
    if not tool:
        return _response(400, {
            "ok": False,
            "error": {"message": "Missing 'tool' in request body", "error_type": "validation_error"},
        })

    result = asyncio.run(invoke_tool(tool, body.get("arguments") or {}))
    return _response(200, result)
