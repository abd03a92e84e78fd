"""Tests for response formatting helpers."""

import pytest
from src.models.contact import Contact
from src.models.contract import ContractType
from src.models.property import Address, Property
from src.services.formatters import (
    contract_type_label,
    format_address_short,
    format_prepared_contract,
    format_price,
)


@pytest.mark.unit
def test_format_price_groups_thousands():
    # narrow no-break space between groups, no-break space before the symbol
    assert format_price(450000) == "450\u202f000\xa0€"
    assert format_price(1250000.4, "CHF") == "1\u202f250\u202f000\xa0CHF"
    assert format_price(None) == "Price on request"


@pytest.mark.unit
def test_format_address_short():
    assert format_address_short(Address(street="12 Rue de la Gare", city="Luxembourg")) == (
        "12 Rue de la Gare, Luxembourg"
    )
    assert format_address_short(Address(city="Esch")) == "Esch"
    assert format_address_short(Address()) == "No address"
    assert format_address_short(None) == "No address"


@pytest.mark.unit
def test_contract_type_label():
    assert contract_type_label(ContractType.SALE_EXISTING) == "Sale existing"


@pytest.mark.unit
def test_prepared_contract_summary():
    prop = Property(
        id="p-1",
        agency_id="agency-a1",
        reference="APT-001",
        price=450000,
        address=Address(street="12 Rue de la Gare", city="Luxembourg"),
    )
    contact = Contact(id="c-1", agency_id="agency-a1", first_name="Jean", last_name="Dupont")

    text = format_prepared_contract(
        "k-1",
        ContractType.MANDATE,
        prop,
        contact,
        {"commission_rate": 3.0, "exclusivity": True},
        ["Found property: APT-001"],
        ["Have the owner sign"],
        warnings=["task_0: insert tasks failed"],
    )

    assert "## 📋 Mandate Contract" in text
    assert "### Owner" in text
    assert "- **Commission**: 3%" in text
    assert "- **Exclusive**: Yes" in text
    assert "- ⚠️ task_0: insert tasks failed" in text
    assert "- [ ] Have the owner sign" in text
    assert text.endswith("**Contract ID**: `k-1`")
