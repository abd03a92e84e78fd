"""Email drafting models."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class EmailType(str, Enum):
    """Kinds of client email the agent can draft."""
    PROPERTY_PRESENTATION = "property_presentation"
    VISIT_CONFIRMATION = "visit_confirmation"
    VISIT_FOLLOWUP = "visit_followup"
    OFFER_RECEIVED = "offer_received"
    CONTRACT_READY = "contract_ready"
    GENERAL = "general"


class EmailTone(str, Enum):
    PROFESSIONAL = "professional"
    FRIENDLY = "friendly"
    FORMAL = "formal"


class EmailLanguage(str, Enum):
    EN = "en"
    FR = "fr"
    DE = "de"


class EmailDraft(BaseModel):
    """A generated email, never sent."""
    subject: str = Field(..., description="Email subject line")
    body: str = Field(..., description="Plain-text email body")
    to: Optional[str] = Field(None, description="Recipient email address, if known")
    warnings: list[str] = Field(default_factory=list, description="Non-fatal issues while drafting")
