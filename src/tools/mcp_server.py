"""
MCP stdio server exposing the agency agent tools.

Each tool is a thin wrapper around `invoke_tool`, which validates the
arguments and returns `{"ok": ..., "data" | "error": ...}`. Logs go to
stderr; stdout carries the MCP protocol.
"""

import sys
from typing import Any, Optional

from mcp.server.fastmcp import FastMCP

from src.tools.registry import TOOLS, invoke_tool
from src.utils.config import AgentConfig
from src.utils.logging import get_structured_logger
from src.utils.logging_config import LoggingConfig

logger = get_structured_logger(__name__)

mcp = FastMCP(AgentConfig.MCP_SERVER_NAME)


def _arguments(**kwargs: Any) -> dict:
    """Drop unset optional arguments so input model defaults apply."""
    return {key: value for key, value in kwargs.items() if value is not None}


@mcp.tool(name="resolve_contact", description=TOOLS["resolve_contact"].description)
async def resolve_contact(
    query: str,
    agency_id: str,
    type: Optional[str] = None,
    status: Optional[str] = None,
) -> dict:
    return await invoke_tool(
        "resolve_contact",
        _arguments(query=query, agency_id=agency_id, type=type, status=status),
    )


@mcp.tool(name="resolve_property", description=TOOLS["resolve_property"].description)
async def resolve_property(
    query: str,
    agency_id: str,
    type: Optional[str] = None,
    status: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    city: Optional[str] = None,
) -> dict:
    return await invoke_tool(
        "resolve_property",
        _arguments(
            query=query,
            agency_id=agency_id,
            type=type,
            status=status,
            min_price=min_price,
            max_price=max_price,
            city=city,
        ),
    )


@mcp.tool(name="list_properties", description=TOOLS["list_properties"].description)
async def list_properties(
    agency_id: str,
    type: Optional[str] = None,
    status: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    city: Optional[str] = None,
    min_bedrooms: Optional[int] = None,
    owner_id: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
) -> dict:
    return await invoke_tool(
        "list_properties",
        _arguments(
            agency_id=agency_id,
            type=type,
            status=status,
            min_price=min_price,
            max_price=max_price,
            city=city,
            min_bedrooms=min_bedrooms,
            owner_id=owner_id,
            search=search,
            limit=limit,
            offset=offset,
        ),
    )


@mcp.tool(name="create_contract", description=TOOLS["create_contract"].description)
async def create_contract(type: str, property_query: str, contact_query: str, agency_id: str) -> dict:
    return await invoke_tool(
        "create_contract",
        _arguments(
            type=type,
            property_query=property_query,
            contact_query=contact_query,
            agency_id=agency_id,
        ),
    )


@mcp.tool(name="update_contract_status", description=TOOLS["update_contract_status"].description)
async def update_contract_status(
    id: str,
    status: str,
    agency_id: str,
    notes: Optional[str] = None,
) -> dict:
    return await invoke_tool(
        "update_contract_status",
        _arguments(id=id, status=status, agency_id=agency_id, notes=notes),
    )


@mcp.tool(name="sign_contract", description=TOOLS["sign_contract"].description)
async def sign_contract(
    id: str,
    agency_id: str,
    signed_date: Optional[str] = None,
    notes: Optional[str] = None,
) -> dict:
    return await invoke_tool(
        "sign_contract",
        _arguments(id=id, agency_id=agency_id, signed_date=signed_date, notes=notes),
    )


@mcp.tool(name="get_contract", description=TOOLS["get_contract"].description)
async def get_contract(id: str, agency_id: str) -> dict:
    return await invoke_tool("get_contract", _arguments(id=id, agency_id=agency_id))


@mcp.tool(name="list_contracts", description=TOOLS["list_contracts"].description)
async def list_contracts(
    agency_id: str,
    type: Optional[str] = None,
    status: Optional[str] = None,
    property_query: Optional[str] = None,
    contact_query: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
) -> dict:
    return await invoke_tool(
        "list_contracts",
        _arguments(
            agency_id=agency_id,
            type=type,
            status=status,
            property_query=property_query,
            contact_query=contact_query,
            limit=limit,
            offset=offset,
        ),
    )


@mcp.tool(name="prepare_contract", description=TOOLS["prepare_contract"].description)
async def prepare_contract(
    type: str,
    property_query: str,
    contact_query: str,
    agency_id: str,
    commission_rate: Optional[float] = None,
    duration_months: Optional[int] = None,
    exclusivity: Optional[bool] = None,
    notes: Optional[str] = None,
    contact_first_name: Optional[str] = None,
    contact_last_name: Optional[str] = None,
    contact_phone: Optional[str] = None,
    contact_email: Optional[str] = None,
    contact_type: Optional[str] = None,
    create_tasks: bool = True,
) -> dict:
    return await invoke_tool(
        "prepare_contract",
        _arguments(
            type=type,
            property_query=property_query,
            contact_query=contact_query,
            agency_id=agency_id,
            commission_rate=commission_rate,
            duration_months=duration_months,
            exclusivity=exclusivity,
            notes=notes,
            contact_first_name=contact_first_name,
            contact_last_name=contact_last_name,
            contact_phone=contact_phone,
            contact_email=contact_email,
            contact_type=contact_type,
            create_tasks=create_tasks,
        ),
    )


@mcp.tool(name="quick_mandate", description=TOOLS["quick_mandate"].description)
async def quick_mandate(
    property_query: str,
    owner_query: str,
    agency_id: str,
    commission_rate: float = 3,
    exclusivity: bool = False,
    duration_months: int = 3,
) -> dict:
    return await invoke_tool(
        "quick_mandate",
        _arguments(
            property_query=property_query,
            owner_query=owner_query,
            agency_id=agency_id,
            commission_rate=commission_rate,
            exclusivity=exclusivity,
            duration_months=duration_months,
        ),
    )


@mcp.tool(name="draft_email", description=TOOLS["draft_email"].description)
async def draft_email(
    email_type: str,
    contact_query: str,
    agency_id: str,
    property_query: Optional[str] = None,
    visit_id: Optional[str] = None,
    tone: str = "professional",
    language: str = "en",
    custom_subject: Optional[str] = None,
    custom_message: Optional[str] = None,
    include_price: bool = True,
    include_characteristics: bool = True,
) -> dict:
    return await invoke_tool(
        "draft_email",
        _arguments(
            email_type=email_type,
            contact_query=contact_query,
            agency_id=agency_id,
            property_query=property_query,
            visit_id=visit_id,
            tone=tone,
            language=language,
            custom_subject=custom_subject,
            custom_message=custom_message,
            include_price=include_price,
            include_characteristics=include_characteristics,
        ),
    )


@mcp.tool(name="schedule_visit", description=TOOLS["schedule_visit"].description)
async def schedule_visit(
    contact_query: str,
    property_query: str,
    date: str,
    agency_id: str,
    time: Optional[str] = None,
    duration_minutes: int = 60,
    notes: Optional[str] = None,
    contact_first_name: Optional[str] = None,
    contact_last_name: Optional[str] = None,
    contact_phone: Optional[str] = None,
    contact_email: Optional[str] = None,
    contact_type: Optional[str] = None,
    create_reminder: bool = True,
) -> dict:
    return await invoke_tool(
        "schedule_visit",
        _arguments(
            contact_query=contact_query,
            property_query=property_query,
            date=date,
            agency_id=agency_id,
            time=time,
            duration_minutes=duration_minutes,
            notes=notes,
            contact_first_name=contact_first_name,
            contact_last_name=contact_last_name,
            contact_phone=contact_phone,
            contact_email=contact_email,
            contact_type=contact_type,
            create_reminder=create_reminder,
        ),
    )


@mcp.tool(name="quick_reschedule", description=TOOLS["quick_reschedule"].description)
async def quick_reschedule(
    visit_id: str,
    new_date: str,
    agency_id: str,
    new_time: Optional[str] = None,
    notify: bool = True,
) -> dict:
    return await invoke_tool(
        "quick_reschedule",
        _arguments(
            visit_id=visit_id,
            new_date=new_date,
            agency_id=agency_id,
            new_time=new_time,
            notify=notify,
        ),
    )


def main() -> None:
    """Console entry point: run the server over stdio."""
    LoggingConfig.setup_logging(stream=sys.stderr)
    logger.info("Starting MCP server", server_name=AgentConfig.MCP_SERVER_NAME, tool_count=len(TOOLS))
    mcp.run()


if __name__ == "__main__":
    main()
