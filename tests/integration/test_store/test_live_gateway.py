"""Round trips against a live Supabase project.

Set INTEGRATION_SUPABASE_URL, INTEGRATION_SUPABASE_KEY and
INTEGRATION_AGENCY_ID to run these; they are skipped otherwise.
"""

import os
import pytest
from unittest.mock import patch

from src.models.resolution import Resolved
from src.services.entity_resolver import EntityResolver
from src.services.supabase_client import QueryGateway
from src.utils.config import AgentConfig

LIVE_URL = os.environ.get("INTEGRATION_SUPABASE_URL")
LIVE_KEY = os.environ.get("INTEGRATION_SUPABASE_KEY")
LIVE_AGENCY_ID = os.environ.get("INTEGRATION_AGENCY_ID")

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        not (LIVE_URL and LIVE_KEY and LIVE_AGENCY_ID),
        reason="live Supabase credentials not configured",
    ),
]


@pytest.fixture
def live_gateway():
    with patch.object(AgentConfig, "SUPABASE_URL", LIVE_URL), \
            patch.object(AgentConfig, "SUPABASE_SERVICE_ROLE_KEY", LIVE_KEY), \
            patch("src.services.supabase_client._client", None):
        yield QueryGateway()


@pytest.mark.asyncio
async def test_contact_round_trip(live_gateway):
    """Insert, resolve by email, update and delete a contact."""
    row = await live_gateway.insert_record("contacts", {
        "agency_id": LIVE_AGENCY_ID,
        "type": "lead",
        "first_name": "Integration",
        "last_name": "Probe",
        "email": "integration.check@example.invalid",
        "status": "new",
        "source": "agent",
        "tags": [],
    })
    try:
        result = await EntityResolver(live_gateway).resolve_contact(
            "INTEGRATION.PROBE@example.invalid", LIVE_AGENCY_ID
        )
        assert isinstance(result, Resolved)
        assert result.record.id == row["id"]

        updated = await live_gateway.update_record(
            "contacts", row["id"], LIVE_AGENCY_ID, {"status": "contacted"}
        )
        assert updated["status"] == "contacted"
    finally:
        await live_gateway.delete_record("contacts", row["id"], LIVE_AGENCY_ID)

    assert await live_gateway.get_by_id("contacts", row["id"], LIVE_AGENCY_ID) is None


@pytest.mark.asyncio
async def test_list_is_tenant_scoped(live_gateway):
    rows, total = await live_gateway.list_records("properties", LIVE_AGENCY_ID, limit=5)

    assert total >= len(rows)
    assert all(row["agency_id"] == LIVE_AGENCY_ID for row in rows)
