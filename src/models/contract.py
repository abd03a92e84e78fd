"""Contract models and the contract status state machine."""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field


class ContractType(str, Enum):
    """Contract kinds handled by the agency."""
    MANDATE = "mandate"
    SALE_EXISTING = "sale_existing"
    SALE_VEFA = "sale_vefa"
    RENTAL = "rental"
    OFFER = "offer"
    RESERVATION = "reservation"


class ContractStatus(str, Enum):
    """Contract lifecycle statuses."""
    DRAFT = "draft"
    PENDING = "pending"
    ACTIVE = "active"
    SIGNED = "signed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


SALE_CONTRACT_TYPES = frozenset({ContractType.SALE_EXISTING, ContractType.SALE_VEFA})

TERMINAL_STATUSES = frozenset({
    ContractStatus.COMPLETED,
    ContractStatus.CANCELLED,
    ContractStatus.EXPIRED,
})

# Forward transitions; cancelled/expired are reachable from any non-terminal status.
_FORWARD_TRANSITIONS: dict[ContractStatus, frozenset[ContractStatus]] = {
    ContractStatus.DRAFT: frozenset({ContractStatus.PENDING}),
    ContractStatus.PENDING: frozenset({ContractStatus.ACTIVE}),
    ContractStatus.ACTIVE: frozenset({ContractStatus.PENDING, ContractStatus.SIGNED}),
    ContractStatus.SIGNED: frozenset({ContractStatus.COMPLETED}),
}


def allowed_transitions(current: ContractStatus) -> frozenset[ContractStatus]:
    """Statuses a contract in `current` may move to."""
    if current in TERMINAL_STATUSES:
        return frozenset()
    return _FORWARD_TRANSITIONS.get(current, frozenset()) | {
        ContractStatus.CANCELLED,
        ContractStatus.EXPIRED,
    }


def can_transition(current: ContractStatus, target: ContractStatus) -> bool:
    return target in allowed_transitions(current)


class ContractTerms(BaseModel):
    """Free-form terms stored in the contract `data` payload."""
    commission_rate: Optional[float] = Field(None, ge=0, le=100, description="Commission rate (%)")
    duration_months: Optional[int] = Field(None, gt=0, description="Contract duration in months")
    exclusivity: Optional[bool] = Field(None, description="Exclusive contract?")
    notes: Optional[str] = Field(None, description="Contract notes")


class Contract(BaseModel):
    """Contract between the agency, a property and a contact."""
    id: str = Field(..., description="Contract ID (uuid)")
    agency_id: str = Field(..., description="Owning agency (tenant) ID")
    type: ContractType = Field(..., description="Contract type")
    status: ContractStatus = Field(default=ContractStatus.DRAFT, description="Contract status")
    property_id: str = Field(..., description="Property ID")
    contact_id: str = Field(..., description="Contact ID")
    property_category: Optional[str] = Field(None, description="Property type at creation time")
    signature_method: str = Field(default="electronic")
    signed_at: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict, description="Terms payload")
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
