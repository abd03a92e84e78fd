"""Test data factories using Faker."""

from faker import Faker
from typing import Optional

fake = Faker()

AGENCY_ID = "agency-a1"
OTHER_AGENCY_ID = "agency-b2"


def _timestamps(updated_at: Optional[str] = None) -> dict:
    stamp = updated_at or fake.date_time_this_year().isoformat()
    return {"created_at": stamp, "updated_at": stamp}


def create_contact_data(
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
    agency_id: str = AGENCY_ID,
    **overrides,
) -> dict:
    """Create a contact row."""
    row = {
        "id": fake.uuid4(),
        "agency_id": agency_id,
        "type": "buyer",
        "first_name": first_name or fake.first_name(),
        "last_name": last_name if last_name is not None else fake.last_name(),
        "email": fake.unique.email(),
        "phone": None,
        "status": "new",
        "source": "website",
        "tags": [],
        "notes": None,
        **_timestamps(overrides.pop("updated_at", None)),
    }
    row.update(overrides)
    return row


def create_property_data(
    reference: Optional[str] = None,
    agency_id: str = AGENCY_ID,
    street: Optional[str] = None,
    city: str = "Luxembourg",
    **overrides,
) -> dict:
    """Create a property row."""
    row = {
        "id": fake.uuid4(),
        "agency_id": agency_id,
        "reference": reference or f"APT-{fake.unique.random_int(min=100, max=999)}",
        "type": "apartment",
        "status": "draft",
        "price": fake.random_int(min=200000, max=2000000),
        "address": {
            "street": street or fake.street_address(),
            "city": city,
            "postal_code": f"L-{fake.random_int(min=1000, max=9999)}",
            "country": "LU",
        },
        "characteristics": {
            "surface": fake.random_int(min=40, max=250),
            "bedrooms": fake.random_int(min=1, max=5),
            "bathrooms": fake.random_int(min=1, max=3),
        },
        "owner_id": None,
        "tags": [],
        **_timestamps(overrides.pop("updated_at", None)),
    }
    row.update(overrides)
    return row


def create_contract_data(
    property_id: str,
    contact_id: str,
    status: str = "draft",
    agency_id: str = AGENCY_ID,
    **overrides,
) -> dict:
    """Create a contract row."""
    row = {
        "id": fake.uuid4(),
        "agency_id": agency_id,
        "type": "mandate",
        "status": status,
        "property_id": property_id,
        "contact_id": contact_id,
        "property_category": "apartment",
        "signature_method": "electronic",
        "signed_at": None,
        "data": {},
        **_timestamps(),
    }
    row.update(overrides)
    return row


def create_visit_data(
    property_id: Optional[str] = None,
    contact_id: Optional[str] = None,
    agency_id: str = AGENCY_ID,
    **overrides,
) -> dict:
    """Create a visit row."""
    row = {
        "id": fake.uuid4(),
        "agency_id": agency_id,
        "property_id": property_id,
        "contact_id": contact_id,
        "date": "2024-12-20",
        "start_time": "14:30",
        "status": "scheduled",
        "notes": None,
    }
    row.update(overrides)
    return row
