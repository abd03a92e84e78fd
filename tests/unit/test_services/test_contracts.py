"""Tests for contract operations and the status state machine."""

import pytest
from freezegun import freeze_time
from src.models.contract import ContractStatus, allowed_transitions, can_transition
from src.models.tool_inputs import (
    CreateContractInput,
    GetContractInput,
    ListContractsInput,
    SignContractInput,
    UpdateContractStatusInput,
)
from src.services.contracts import (
    create_contract,
    get_contract,
    list_contracts,
    sign_contract,
    update_contract_status,
)
from src.utils.errors import DateParseError, NotFoundError, ValidationError, WriteError
from tests.utils.factories import OTHER_AGENCY_ID, create_contract_data


@pytest.fixture
def contract_row(seeded_gateway, apt_001, jean):
    row = create_contract_data(apt_001["id"], jean["id"])
    seeded_gateway.rows("contracts").append(dict(row))
    return row


@pytest.mark.unit
@pytest.mark.parametrize("current,target", [
    (ContractStatus.DRAFT, ContractStatus.PENDING),
    (ContractStatus.PENDING, ContractStatus.ACTIVE),
    (ContractStatus.ACTIVE, ContractStatus.PENDING),
    (ContractStatus.ACTIVE, ContractStatus.SIGNED),
    (ContractStatus.SIGNED, ContractStatus.COMPLETED),
    (ContractStatus.DRAFT, ContractStatus.CANCELLED),
    (ContractStatus.SIGNED, ContractStatus.EXPIRED),
])
def test_allowed_transitions(current, target):
    assert can_transition(current, target)


@pytest.mark.unit
@pytest.mark.parametrize("current,target", [
    (ContractStatus.DRAFT, ContractStatus.SIGNED),
    (ContractStatus.PENDING, ContractStatus.DRAFT),
    (ContractStatus.SIGNED, ContractStatus.ACTIVE),
    (ContractStatus.COMPLETED, ContractStatus.CANCELLED),
    (ContractStatus.CANCELLED, ContractStatus.DRAFT),
])
def test_rejected_transitions(current, target):
    assert not can_transition(current, target)


@pytest.mark.unit
def test_terminal_statuses_have_no_transitions():
    for status in (ContractStatus.COMPLETED, ContractStatus.CANCELLED, ContractStatus.EXPIRED):
        assert allowed_transitions(status) == frozenset()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_create_contract_starts_in_draft(seeded_gateway, agency_id, apt_001, marie):
    """create_contract resolves both entities and inserts an empty-terms draft."""
    params = CreateContractInput(
        type="rental", property_query="APT-001", contact_query="Marie Schmit", agency_id=agency_id
    )

    result = await create_contract(params, seeded_gateway)

    row = seeded_gateway.rows("contracts")[0]
    assert row["status"] == "draft"
    assert row["data"] == {}
    assert row["property_id"] == apt_001["id"]
    assert row["contact_id"] == marie["id"]
    assert result["contract"]["id"] == row["id"]
    assert result["transcript"]["created"] == {"contract": [row["id"]]}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_status_writes_only_status(seeded_gateway, agency_id, contract_row):
    """A legal transition updates the status column and nothing else."""
    params = UpdateContractStatusInput(id=contract_row["id"], status="pending", agency_id=agency_id)

    result = await update_contract_status(params, seeded_gateway)

    assert result["changed"] is True
    assert result["previous_status"] == "draft"
    assert result["contract"]["status"] == "pending"
    stored = seeded_gateway.rows("contracts")[0]
    assert {k: v for k, v in stored.items() if k != "status"} == {
        k: v for k, v in contract_row.items() if k != "status"
    }


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_status_same_status_is_noop(seeded_gateway, agency_id, contract_row):
    params = UpdateContractStatusInput(id=contract_row["id"], status="draft", agency_id=agency_id)

    result = await update_contract_status(params, seeded_gateway)

    assert result["changed"] is False
    assert seeded_gateway.writes == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_status_rejects_illegal_transition(seeded_gateway, agency_id, contract_row):
    """Illegal transitions raise ValidationError listing the allowed targets."""
    params = UpdateContractStatusInput(id=contract_row["id"], status="completed", agency_id=agency_id)

    with pytest.raises(ValidationError) as exc_info:
        await update_contract_status(params, seeded_gateway)

    assert exc_info.value.suggestions == ["cancelled", "expired", "pending"]
    assert seeded_gateway.writes == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_status_is_tenant_scoped(seeded_gateway, contract_row):
    """Another agency cannot see or change the contract."""
    params = UpdateContractStatusInput(id=contract_row["id"], status="pending", agency_id=OTHER_AGENCY_ID)

    with pytest.raises(NotFoundError):
        await update_contract_status(params, seeded_gateway)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_update_status_store_failure_is_write_error(seeded_gateway, agency_id, contract_row):
    seeded_gateway.fail("update", "contracts")
    params = UpdateContractStatusInput(id=contract_row["id"], status="pending", agency_id=agency_id)

    with pytest.raises(WriteError):
        await update_contract_status(params, seeded_gateway)


@pytest.mark.unit
@pytest.mark.asyncio
@freeze_time("2024-12-09 12:00:00")
async def test_sign_contract_parses_natural_date(seeded_gateway, agency_id, contract_row):
    """Signing records status and a parsed ISO date."""
    contract_row_stored = seeded_gateway.rows("contracts")[0]
    contract_row_stored["status"] = "active"
    params = SignContractInput(id=contract_row["id"], signed_date="yesterday", agency_id=agency_id)

    result = await sign_contract(params, seeded_gateway)

    assert result["changed"] is True
    assert contract_row_stored["status"] == "signed"
    assert contract_row_stored["signed_at"] == "2024-12-08"


@pytest.mark.unit
@pytest.mark.asyncio
@freeze_time("2024-12-09 12:00:00")
async def test_sign_contract_defaults_to_today(seeded_gateway, agency_id, contract_row):
    seeded_gateway.rows("contracts")[0]["status"] = "active"
    params = SignContractInput(id=contract_row["id"], agency_id=agency_id)

    result = await sign_contract(params, seeded_gateway)

    assert result["contract"]["signed_at"] == "2024-12-09"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_sign_draft_contract_is_rejected(seeded_gateway, agency_id, contract_row):
    """Drafts must go through pending and active before signing."""
    params = SignContractInput(id=contract_row["id"], agency_id=agency_id)

    with pytest.raises(ValidationError):
        await sign_contract(params, seeded_gateway)

    assert seeded_gateway.writes == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_sign_contract_with_bad_date(seeded_gateway, agency_id, contract_row):
    seeded_gateway.rows("contracts")[0]["status"] = "active"
    params = SignContractInput(id=contract_row["id"], signed_date="not a date", agency_id=agency_id)

    with pytest.raises(DateParseError):
        await sign_contract(params, seeded_gateway)

    assert seeded_gateway.writes == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_get_contract(seeded_gateway, agency_id, contract_row):
    result = await get_contract(GetContractInput(id=contract_row["id"], agency_id=agency_id), seeded_gateway)

    assert result["contract"]["id"] == contract_row["id"]
    assert result["contract"]["type"] == "mandate"

    with pytest.raises(NotFoundError):
        await get_contract(GetContractInput(id="missing", agency_id=agency_id), seeded_gateway)


@pytest.fixture
def contract_book(seeded_gateway, apt_001, jean, marie):
    rows = [
        create_contract_data(apt_001["id"], jean["id"], created_at="2024-12-01T09:00:00"),
        create_contract_data(apt_001["id"], marie["id"], type="offer", status="pending",
                             created_at="2024-12-05T09:00:00"),
        create_contract_data(apt_001["id"], marie["id"], type="sale_existing",
                             created_at="2024-12-03T09:00:00"),
        create_contract_data(apt_001["id"], jean["id"], agency_id=OTHER_AGENCY_ID),
    ]
    seeded_gateway.rows("contracts").extend(dict(row) for row in rows)
    return rows


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_contracts_newest_first(seeded_gateway, agency_id, contract_book):
    result = await list_contracts(ListContractsInput(agency_id=agency_id), seeded_gateway)

    assert [item["id"] for item in result["items"]] == [
        contract_book[1]["id"], contract_book[2]["id"], contract_book[0]["id"]
    ]
    assert result["total"] == 3
    assert result["has_more"] is False


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_contracts_filters(seeded_gateway, agency_id, contract_book):
    by_status = await list_contracts(
        ListContractsInput(agency_id=agency_id, status="pending"), seeded_gateway
    )
    by_contact = await list_contracts(
        ListContractsInput(agency_id=agency_id, contact_query="Marie Schmit", type="sale_existing"),
        seeded_gateway,
    )
    paged = await list_contracts(ListContractsInput(agency_id=agency_id, limit=2), seeded_gateway)

    assert [item["type"] for item in by_status["items"]] == ["offer"]
    assert [item["id"] for item in by_contact["items"]] == [contract_book[2]["id"]]
    assert paged["has_more"] is True


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_contracts_unresolved_filter_raises(seeded_gateway, agency_id, contract_book):
    """An unknown property never widens the listing to every contract."""
    with pytest.raises(NotFoundError):
        await list_contracts(
            ListContractsInput(agency_id=agency_id, property_query="xyz-unknown"), seeded_gateway
        )
