"""Contact model - buyers, sellers, leads and investors of an agency."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class ContactType(str, Enum):
    """Contact roles."""
    LEAD = "lead"
    BUYER = "buyer"
    SELLER = "seller"
    INVESTOR = "investor"


class ContactStatus(str, Enum):
    """Contact pipeline statuses."""
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    NURTURING = "nurturing"
    CLOSED = "closed"


class Contact(BaseModel):
    """Contact model - the agency's people table."""
    id: str = Field(..., description="Contact ID (uuid)")
    agency_id: str = Field(..., description="Owning agency (tenant) ID")
    type: ContactType = Field(default=ContactType.LEAD, description="lead, buyer, seller, investor")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(default="", description="Last name")
    email: Optional[str] = Field(None, description="Email address")
    phone: Optional[str] = Field(None, description="Phone number")
    status: str = Field(default=ContactStatus.NEW.value, description="Pipeline status")
    source: Optional[str] = Field(None, description="Where the contact came from")
    tags: list[str] = Field(default_factory=list, description="Free-form tags")
    notes: Optional[str] = Field(None, description="Contact notes")
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("last_name", "tags", mode="before")
    @classmethod
    def null_to_empty(cls, value, info):
        if value is None:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)
        return value

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
