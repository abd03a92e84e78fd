"""Property listing with filters and pagination."""

from typing import Optional

from src.models.resolution import EntityKind
from src.models.tool_inputs import ListPropertiesInput
from src.services.entity_resolver import parse_record
from src.services.supabase_client import QueryGateway, get_query_gateway
from src.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)

SEARCH_COLUMNS = ["reference", "address->>street", "address->>city"]


def property_filters(params: ListPropertiesInput) -> dict:
    """Translate tool filters into gateway filters."""
    return {
        "type": params.type.value if params.type else None,
        "status": params.status.value if params.status else None,
        "price__gte": params.min_price,
        "price__lte": params.max_price,
        "address->>city__ilike": f"%{params.city.strip()}%" if params.city else None,
        # json (not text) arrow so the comparison is numeric
        "characteristics->bedrooms__gte": params.min_bedrooms,
        "owner_id": params.owner_id,
    }


async def list_properties(params: ListPropertiesInput, gateway: Optional[QueryGateway] = None) -> dict:
    """List a tenant's properties, most recently updated first."""
    gateway = gateway or get_query_gateway()
    search = (SEARCH_COLUMNS, params.search.strip()) if params.search and params.search.strip() else None

    with log_timing("list_properties", logger=logger, agency_id=params.agency_id):
        rows, total = await gateway.list_records(
            "properties",
            params.agency_id,
            filters=property_filters(params),
            search=search,
            limit=params.limit,
            offset=params.offset,
            order_by="updated_at",
        )

    items = [parse_record(EntityKind.PROPERTY, row).model_dump(mode="json") for row in rows]
    return {
        "items": items,
        "total": total,
        "limit": params.limit,
        "offset": params.offset,
        "has_more": total > params.offset + len(items),
    }
