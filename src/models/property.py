"""Property models."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class PropertyType(str, Enum):
    """Property categories."""
    HOUSE = "house"
    APARTMENT = "apartment"
    OFFICE = "office"
    RETAIL = "retail"
    LAND = "land"


class PropertyStatus(str, Enum):
    """Listing statuses."""
    DRAFT = "draft"
    PUBLISHED = "published"
    UNDER_OFFER = "under_offer"
    SOLD = "sold"
    RENTED = "rented"
    ARCHIVED = "archived"


class Address(BaseModel):
    """Postal address stored as JSON on the property row."""
    street: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class Characteristics(BaseModel):
    """Physical characteristics stored as JSON on the property row."""
    surface: Optional[float] = Field(None, description="Living surface in m2")
    rooms: Optional[int] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    year_built: Optional[int] = None
    floor: Optional[int] = None
    parking: Optional[int] = None
    energy_class: Optional[str] = None


class Property(BaseModel):
    """Real estate property."""
    id: str = Field(..., description="Property ID (uuid)")
    agency_id: str = Field(..., description="Owning agency (tenant) ID")
    reference: str = Field(..., description="Human-facing reference, e.g. APT-001")
    type: Optional[str] = Field(None, description="house, apartment, office, retail, land")
    status: str = Field(default=PropertyStatus.DRAFT.value, description="Listing status")
    price: Optional[float] = Field(None, description="Asking price")
    address: Address = Field(default_factory=Address)
    characteristics: Characteristics = Field(default_factory=Characteristics)
    owner_id: Optional[str] = Field(None, description="Owner contact ID")
    tags: list[str] = Field(default_factory=list)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("address", "characteristics", "tags", mode="before")
    @classmethod
    def null_json_to_empty(cls, value, info):
        # nullable JSON columns come back as None
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value
