"""
Tool registry - named, schema-validated agent operations.

`invoke_tool` is the single boundary used by both the MCP server and the
HTTP entry point. It validates the arguments against the tool's input
model, runs the handler under a fresh correlation id and always returns
`{"ok": true, "data": ...}` or `{"ok": false, "error": {...}}`.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from src.models.resolution import Ambiguous, EntityKind, Resolved, ResolutionResult
from src.models.tool_inputs import (
    CreateContractInput,
    DraftEmailInput,
    GetContractInput,
    ListContractsInput,
    ListPropertiesInput,
    PrepareContractInput,
    QuickMandateInput,
    QuickRescheduleInput,
    ResolveContactInput,
    ResolvePropertyInput,
    ScheduleVisitInput,
    SignContractInput,
    UpdateContractStatusInput,
)
from src.services import contracts, draft_email, prepare_contract, properties, visits
from src.services.entity_resolver import EntityResolver, ResolveFilters
from src.services.supabase_client import QueryGateway, get_query_gateway
from src.utils.errors import AgencyAgentError, ValidationError
from src.utils.logging import correlation_context, get_structured_logger

logger = get_structured_logger(__name__)

Handler = Callable[[Any, QueryGateway], Awaitable[dict]]


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    input_model: type[BaseModel]
    handler: Handler


def resolution_payload(kind: EntityKind, result: ResolutionResult) -> dict:
    if isinstance(result, Resolved):
        return {
            "status": "resolved",
            "tier": result.tier.value,
            "score": result.score,
            kind.value: result.record.model_dump(mode="json"),
        }
    return {
        "status": "ambiguous" if isinstance(result, Ambiguous) else "not_found",
        "query": result.query,
        "suggestions": result.suggestions,
    }


async def _resolve_contact(params: ResolveContactInput, gateway: QueryGateway) -> dict:
    filters = ResolveFilters(
        type=params.type.value if params.type else None,
        status=params.status.value if params.status else None,
    )
    result = await EntityResolver(gateway).resolve_contact(params.query, params.agency_id, filters)
    return resolution_payload(EntityKind.CONTACT, result)


async def _resolve_property(params: ResolvePropertyInput, gateway: QueryGateway) -> dict:
    filters = ResolveFilters(
        type=params.type.value if params.type else None,
        status=params.status.value if params.status else None,
        min_price=params.min_price,
        max_price=params.max_price,
        city=params.city,
    )
    result = await EntityResolver(gateway).resolve_property(params.query, params.agency_id, filters)
    return resolution_payload(EntityKind.PROPERTY, result)


TOOLS: dict[str, ToolSpec] = {
    spec.name: spec
    for spec in [
        ToolSpec(
            "resolve_contact",
            "Find one contact by ID, email, phone or name. Returns the contact, "
            "or up to 3 suggestions when the query is ambiguous or unknown.",
            ResolveContactInput,
            _resolve_contact,
        ),
        ToolSpec(
            "resolve_property",
            "Find one property by ID, reference (e.g. APT-001) or address, "
            "optionally narrowed by type, status, price range or city.",
            ResolvePropertyInput,
            _resolve_property,
        ),
        ToolSpec(
            "list_properties",
            "List properties with filters (type, status, price range, city, "
            "bedrooms, owner, free-text search) and pagination.",
            ListPropertiesInput,
            properties.list_properties,
        ),
        ToolSpec(
            "create_contract",
            "Create a draft contract for a property and a contact.",
            CreateContractInput,
            contracts.create_contract,
        ),
        ToolSpec(
            "update_contract_status",
            "Move a contract to a new status (draft, pending, active, signed, "
            "completed, cancelled, expired) if the transition is allowed.",
            UpdateContractStatusInput,
            contracts.update_contract_status,
        ),
        ToolSpec(
            "sign_contract",
            "Mark a contract as signed, with an optional signing date such as "
            "'yesterday' or '2024-12-20' (defaults to today).",
            SignContractInput,
            contracts.sign_contract,
        ),
        ToolSpec(
            "get_contract",
            "Get a contract by ID.",
            GetContractInput,
            contracts.get_contract,
        ),
        ToolSpec(
            "list_contracts",
            "List contracts, newest first, filtered by type, status, property "
            "or contact (e.g. 'Show all active mandates'), with pagination.",
            ListContractsInput,
            contracts.list_contracts,
        ),
        ToolSpec(
            "prepare_contract",
            "Prepare a contract: find the property, find or create the contact, "
            "create the draft contract, then follow-up tasks. Example: "
            "'Create a mandate for Marie's property at 3% commission'.",
            PrepareContractInput,
            prepare_contract.prepare_contract,
        ),
        ToolSpec(
            "quick_mandate",
            "Quickly create a draft selling mandate for a property and its owner "
            "(defaults: 3% commission, 3 months, not exclusive).",
            QuickMandateInput,
            prepare_contract.quick_mandate,
        ),
        ToolSpec(
            "draft_email",
            "Draft (never send) a client email: property presentation, visit "
            "confirmation or follow-up, offer received, contract ready, or general.",
            DraftEmailInput,
            draft_email.draft_email,
        ),
        ToolSpec(
            "schedule_visit",
            "Schedule a property viewing: find the property, find or create the "
            "contact, book the slot and add a reminder task for the day before. "
            "Example: 'Schedule a visit with Jean for APT-001 tomorrow at 2pm'.",
            ScheduleVisitInput,
            visits.schedule_visit,
        ),
        ToolSpec(
            "quick_reschedule",
            "Move a visit to a new date and optional time (e.g. 'next Tuesday', "
            "'3pm'), keeping its duration.",
            QuickRescheduleInput,
            visits.quick_reschedule,
        ),
    ]
}


def validation_message(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item["loc"]) or "input"
        parts.append(f"{location}: {item['msg']}")
    return "Invalid arguments - " + "; ".join(parts)


def failure(error: AgencyAgentError) -> dict:
    return {"ok": False, "error": error.to_payload()}


async def invoke_tool(
    name: str,
    arguments: Optional[dict] = None,
    gateway: Optional[QueryGateway] = None,
) -> dict:
    """Validate and run one tool. Never raises (cancellation excepted)."""
    with correlation_context():
        spec = TOOLS.get(name)
        if spec is None:
            logger.warning("Unknown tool requested", tool=name)
            return failure(ValidationError(f"Unknown tool: {name}", suggestions=sorted(TOOLS)))

        try:
            params = spec.input_model.model_validate(arguments or {})
        except PydanticValidationError as e:
            logger.info("Tool arguments rejected", tool=name, error_count=e.error_count())
            return failure(ValidationError(validation_message(e)))

        logger.info("Tool invoked", tool=name, agency_id=params.agency_id)
        try:
            data = await spec.handler(params, gateway or get_query_gateway())
        except AgencyAgentError as e:
            logger.warning(
                "Tool failed",
                tool=name,
                error_type=e.error_type,
                error=e.message,
                agency_id=params.agency_id,
            )
            return failure(e)
        except Exception as e:
            logger.exception("Unexpected tool error", tool=name, error=str(e))
            return failure(AgencyAgentError(f"Unexpected error in {name}: {e}"))

        logger.info("Tool succeeded", tool=name, agency_id=params.agency_id)
        return {"ok": True, "data": data}
