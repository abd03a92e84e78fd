"""Tests for the tool registry boundary."""

import pytest
from src.tools.registry import TOOLS, invoke_tool


@pytest.mark.unit
def test_registry_exposes_all_tools():
    assert set(TOOLS) == {
        "resolve_contact",
        "resolve_property",
        "list_properties",
        "create_contract",
        "update_contract_status",
        "sign_contract",
        "get_contract",
        "list_contracts",
        "prepare_contract",
        "quick_mandate",
        "draft_email",
        "schedule_visit",
        "quick_reschedule",
    }
    for spec in TOOLS.values():
        assert spec.description
        assert "agency_id" in spec.input_model.model_fields


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unknown_tool(seeded_gateway):
    result = await invoke_tool("delete_everything", {}, seeded_gateway)

    assert result["ok"] is False
    assert result["error"]["error_type"] == "validation_error"
    assert "prepare_contract" in result["error"]["suggestions"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_missing_agency_id_is_rejected_before_any_query(seeded_gateway):
    result = await invoke_tool("resolve_contact", {"query": "Jean"}, seeded_gateway)

    assert result["ok"] is False
    assert result["error"]["error_type"] == "validation_error"
    assert "agency_id" in result["error"]["message"]
    assert seeded_gateway.calls == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_invalid_enum_is_rejected(seeded_gateway, agency_id):
    result = await invoke_tool(
        "create_contract",
        {"type": "lease", "property_query": "APT-001", "contact_query": "Jean", "agency_id": agency_id},
        seeded_gateway,
    )

    assert result["ok"] is False
    assert "type" in result["error"]["message"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_resolve_contact_payload(seeded_gateway, agency_id, jean):
    result = await invoke_tool("resolve_contact", {"query": "Jean Dupont", "agency_id": agency_id}, seeded_gateway)

    assert result["ok"] is True
    assert result["data"]["status"] == "resolved"
    assert result["data"]["tier"] == "fuzzy_rank"
    assert result["data"]["contact"]["id"] == jean["id"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unresolved_query_is_not_an_error(seeded_gateway, agency_id):
    """Resolve tools report not_found as data, not as a failure."""
    result = await invoke_tool("resolve_property", {"query": "xyz-unknown", "agency_id": agency_id}, seeded_gateway)

    assert result == {
        "ok": True,
        "data": {"status": "not_found", "query": "xyz-unknown", "suggestions": []},
    }


@pytest.mark.unit
@pytest.mark.asyncio
async def test_workflow_failure_payload(seeded_gateway, agency_id):
    """Typed errors cross the boundary as structured payloads."""
    seeded_gateway.fail("insert", "contracts")

    result = await invoke_tool(
        "prepare_contract",
        {"type": "sale_existing", "property_query": "APT-001", "contact_query": "jean", "agency_id": agency_id},
        seeded_gateway,
    )

    assert result["ok"] is False
    assert result["error"]["error_type"] == "write_error"
    assert result["error"]["actions_taken"] == ["Found property: APT-001", "Found contact: Jean Dupont"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_unexpected_exception_is_contained(seeded_gateway, agency_id):
    seeded_gateway.fail("list", "properties", RuntimeError("socket closed"))

    result = await invoke_tool("list_properties", {"agency_id": agency_id}, seeded_gateway)

    assert result["ok"] is False
    assert result["error"]["error_type"] == "error"
    assert "socket closed" in result["error"]["message"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_properties_through_registry(seeded_gateway, agency_id):
    result = await invoke_tool("list_properties", {"agency_id": agency_id, "limit": 5}, seeded_gateway)

    assert result["ok"] is True
    assert result["data"]["total"] == 1
    assert result["data"]["items"][0]["reference"] == "APT-001"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_schedule_visit_date_error_payload(seeded_gateway, agency_id):
    result = await invoke_tool(
        "schedule_visit",
        {"contact_query": "Jean", "property_query": "APT-001", "date": "whenever", "agency_id": agency_id},
        seeded_gateway,
    )

    assert result["ok"] is False
    assert result["error"]["error_type"] == "date_parse_error"
    assert seeded_gateway.writes == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_malformed_contact_email_is_rejected(seeded_gateway, agency_id):
    result = await invoke_tool(
        "schedule_visit",
        {
            "contact_query": "Paul Weber",
            "property_query": "APT-001",
            "date": "tomorrow",
            "contact_first_name": "Paul",
            "contact_last_name": "Weber",
            "contact_email": "paul at example",
            "agency_id": agency_id,
        },
        seeded_gateway,
    )

    assert result["ok"] is False
    assert "contact_email" in result["error"]["message"]
    assert seeded_gateway.calls == []
