"""Contract operations: create, status changes, signing, lookup."""

from datetime import date
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from src.models.contact import Contact
from src.models.contract import (
    Contract,
    ContractStatus,
    ContractTerms,
    ContractType,
    allowed_transitions,
    can_transition,
)
from src.models.property import Property
from src.models.resolution import EntityKind
from src.models.tool_inputs import (
    CreateContractInput,
    GetContractInput,
    ListContractsInput,
    SignContractInput,
    UpdateContractStatusInput,
)
from src.services.date_parser import parse_natural_date
from src.services.entity_resolver import EntityResolver
from src.services.supabase_client import QueryGateway, get_query_gateway
from src.services.workflow import StepRunner, WorkflowStep
from src.utils.errors import (
    NotFoundError,
    ResolutionError,
    SupabaseError,
    ValidationError,
    WriteError,
)
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


def parse_contract(row: dict) -> Contract:
    try:
        return Contract.model_validate(row)
    except PydanticValidationError as e:
        raise ResolutionError(
            "Malformed contract row from store",
            context={"record_id": row.get("id"), "errors": e.error_count()},
        )


async def fetch_contract(gateway: QueryGateway, contract_id: str, agency_id: str) -> Contract:
    """Tenant-scoped fetch; raises NotFoundError when absent."""
    row = await gateway.get_by_id("contracts", contract_id, agency_id)
    if row is None:
        raise NotFoundError(f"Contract not found: {contract_id}")
    return parse_contract(row)


async def insert_contract(
    gateway: QueryGateway,
    agency_id: str,
    contract_type: ContractType,
    prop: Property,
    contact: Contact,
    terms: Optional[ContractTerms] = None,
) -> Contract:
    """Insert a draft contract linking a resolved property and contact."""
    record = {
        "agency_id": agency_id,
        "type": contract_type.value,
        "status": ContractStatus.DRAFT.value,
        "property_id": prop.id,
        "contact_id": contact.id,
        "property_category": prop.type,
        "signature_method": "electronic",
        "data": (terms or ContractTerms()).model_dump(exclude_none=True),
    }
    row = await gateway.insert_record("contracts", record)
    contract = parse_contract(row)
    logger.info(
        "Contract created",
        contract_id=contract.id,
        contract_type=contract_type.value,
        property_id=prop.id,
        contact_id=contact.id,
        agency_id=agency_id,
    )
    return contract


def check_transition(contract: Contract, target: ContractStatus) -> None:
    if can_transition(contract.status, target):
        return
    allowed = sorted(s.value for s in allowed_transitions(contract.status))
    raise ValidationError(
        f"Cannot move contract from {contract.status.value} to {target.value}",
        suggestions=allowed,
        context={"contract_id": contract.id},
    )


async def _write_status(
    gateway: QueryGateway, contract: Contract, agency_id: str, updates: dict
) -> Contract:
    try:
        row = await gateway.update_record("contracts", contract.id, agency_id, updates)
    except SupabaseError as e:
        raise WriteError(f"Failed to update contract {contract.id}: {e.message}", context=dict(e.context)) from e
    return parse_contract(row)


async def create_contract(
    params: CreateContractInput,
    gateway: Optional[QueryGateway] = None,
    resolver: Optional[EntityResolver] = None,
) -> dict:
    """Resolve property and contact, then insert a draft contract with empty terms."""
    gateway = gateway or get_query_gateway()
    resolver = resolver or EntityResolver(gateway)
    agency_id = params.agency_id

    async def resolve_property(state: dict) -> Property:
        prop = await resolver.resolve_or_raise(EntityKind.PROPERTY, params.property_query, agency_id)
        state["transcript"].actions.append(f"Found property: {prop.reference}")
        return prop

    async def resolve_contact(state: dict) -> Contact:
        contact = await resolver.resolve_or_raise(EntityKind.CONTACT, params.contact_query, agency_id)
        state["transcript"].actions.append(f"Found contact: {contact.full_name}")
        return contact

    async def create(state: dict) -> Contract:
        contract = await insert_contract(
            gateway, agency_id, params.type, state["property"], state["contact"]
        )
        state["transcript"].record_created(
            "contract", contract.id, f"Created {params.type.value} contract (draft)"
        )
        return contract

    runner = StepRunner("create_contract")
    state = await runner.run(
        [
            WorkflowStep("property", resolve_property),
            WorkflowStep("contact", resolve_contact),
            WorkflowStep("contract", create),
        ],
        {"agency_id": agency_id},
    )
    return {
        "contract": state["contract"].model_dump(mode="json"),
        "property_reference": state["property"].reference,
        "contact_name": state["contact"].full_name,
        "transcript": runner.transcript.to_dict(),
    }


async def update_contract_status(
    params: UpdateContractStatusInput,
    gateway: Optional[QueryGateway] = None,
) -> dict:
    """Move a contract along the status state machine. Writes only `status`."""
    gateway = gateway or get_query_gateway()
    contract = await fetch_contract(gateway, params.id, params.agency_id)
    previous = contract.status

    if previous == params.status:
        return {
            "contract": contract.model_dump(mode="json"),
            "previous_status": previous.value,
            "changed": False,
            "notes": params.notes,
        }

    check_transition(contract, params.status)
    updated = await _write_status(gateway, contract, params.agency_id, {"status": params.status.value})
    logger.info(
        "Contract status updated",
        contract_id=contract.id,
        from_status=previous.value,
        to_status=params.status.value,
        agency_id=params.agency_id,
    )
    return {
        "contract": updated.model_dump(mode="json"),
        "previous_status": previous.value,
        "changed": True,
        "notes": params.notes,
    }


async def sign_contract(
    params: SignContractInput,
    gateway: Optional[QueryGateway] = None,
) -> dict:
    """Mark a contract signed on the given (natural-language) date, default today."""
    gateway = gateway or get_query_gateway()
    signed_on = parse_natural_date(params.signed_date).date if params.signed_date else date.today()

    contract = await fetch_contract(gateway, params.id, params.agency_id)
    if contract.status is ContractStatus.SIGNED:
        return {
            "contract": contract.model_dump(mode="json"),
            "changed": False,
            "notes": params.notes,
        }

    check_transition(contract, ContractStatus.SIGNED)
    updated = await _write_status(
        gateway,
        contract,
        params.agency_id,
        {"status": ContractStatus.SIGNED.value, "signed_at": signed_on.isoformat()},
    )
    logger.info(
        "Contract signed",
        contract_id=contract.id,
        signed_at=signed_on.isoformat(),
        agency_id=params.agency_id,
    )
    return {
        "contract": updated.model_dump(mode="json"),
        "changed": True,
        "notes": params.notes,
    }


async def get_contract(params: GetContractInput, gateway: Optional[QueryGateway] = None) -> dict:
    gateway = gateway or get_query_gateway()
    contract = await fetch_contract(gateway, params.id, params.agency_id)
    return {"contract": contract.model_dump(mode="json")}


async def list_contracts(
    params: ListContractsInput,
    gateway: Optional[QueryGateway] = None,
    resolver: Optional[EntityResolver] = None,
) -> dict:
    """
    List a tenant's contracts, newest first.

    Property and contact queries are resolved to ids first; one that does
    not resolve raises instead of silently widening the listing.
    """
    gateway = gateway or get_query_gateway()
    resolver = resolver or EntityResolver(gateway)
    filters = {
        "type": params.type.value if params.type else None,
        "status": params.status.value if params.status else None,
    }
    if params.property_query:
        prop = await resolver.resolve_or_raise(EntityKind.PROPERTY, params.property_query, params.agency_id)
        filters["property_id"] = prop.id
    if params.contact_query:
        contact = await resolver.resolve_or_raise(EntityKind.CONTACT, params.contact_query, params.agency_id)
        filters["contact_id"] = contact.id

    rows, total = await gateway.list_records(
        "contracts",
        params.agency_id,
        filters=filters,
        limit=params.limit,
        offset=params.offset,
        order_by="created_at",
    )
    items = [parse_contract(row).model_dump(mode="json") for row in rows]
    return {
        "items": items,
        "total": total,
        "limit": params.limit,
        "offset": params.offset,
        "has_more": total > params.offset + len(items),
    }
