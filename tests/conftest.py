"""Shared pytest fixtures and configuration."""

import os
import pytest
from unittest.mock import MagicMock
from freezegun import freeze_time

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-key")
os.environ.setdefault("LOG_FORMAT", "text")

from tests.utils.factories import (  # noqa: E402
    AGENCY_ID,
    OTHER_AGENCY_ID,
    create_contact_data,
    create_property_data,
)
from tests.utils.fake_gateway import FakeGateway  # noqa: E402


@pytest.fixture
def agency_id():
    return AGENCY_ID


@pytest.fixture
def other_agency_id():
    return OTHER_AGENCY_ID


@pytest.fixture
def jean():
    """Seller contact Jean Dupont."""
    return create_contact_data(
        "Jean", "Dupont",
        type="seller",
        email="jean.dupont@example.lu",
        phone="+352 621 123 456",
    )


@pytest.fixture
def marie():
    """Buyer contact Marie Schmit."""
    return create_contact_data("Marie", "Schmit", email="marie.schmit@example.lu")


@pytest.fixture
def apt_001():
    """Published apartment APT-001 in Luxembourg."""
    return create_property_data(
        "APT-001",
        street="12 Rue de la Gare",
        city="Luxembourg",
        status="published",
        price=450000,
    )


@pytest.fixture
def seeded_gateway(jean, marie, apt_001):
    """In-memory gateway with two contacts and one property in AGENCY_ID."""
    return FakeGateway({
        "contacts": [jean, marie],
        "properties": [apt_001],
        "contracts": [],
        "tasks": [],
        "visits": [],
    })


@pytest.fixture
def mock_supabase_client():
    """MagicMock Supabase client whose query chain returns itself."""
    client = MagicMock()
    query = MagicMock()
    for method in ("select", "eq", "in_", "neq", "gte", "lte", "ilike", "or_",
                   "order", "range", "limit", "insert", "update", "delete"):
        getattr(query, method).return_value = query
    query.execute.return_value = MagicMock(data=[], count=0)
    client.table.return_value = query
    client.query = query
    return client


@pytest.fixture
def freeze_time_fixture():
    """Fixture for freezing time in tests."""
    with freeze_time("2024-12-09 12:00:00") as frozen_time:
        yield frozen_time
