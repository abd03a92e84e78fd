"""Input models for the agent tools. Every tool is scoped to one agency."""

from typing import Annotated, Optional
from pydantic import BaseModel, EmailStr, Field, StringConstraints, model_validator

from src.models.contact import ContactStatus, ContactType
from src.models.contract import ContractStatus, ContractType
from src.models.email import EmailLanguage, EmailTone, EmailType
from src.models.property import PropertyStatus, PropertyType

NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class AgencyScopedInput(BaseModel):
    """Base for tool inputs."""
    agency_id: str = Field(..., min_length=1, description="Agency (tenant) ID")


class PriceRangeMixin(BaseModel):
    min_price: Optional[float] = Field(None, ge=0, description="Minimum price")
    max_price: Optional[float] = Field(None, ge=0, description="Maximum price")

    @model_validator(mode="after")
    def check_price_range(self):
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("min_price must not exceed max_price")
        return self


class NewContactFields(BaseModel):
    """Used only when the contact query does not resolve."""
    contact_first_name: Optional[NonBlankStr] = Field(None, description="First name (if creating new contact)")
    contact_last_name: Optional[NonBlankStr] = Field(None, description="Last name (if creating new contact)")
    contact_phone: Optional[str] = Field(None, description="Phone (if creating new contact)")
    contact_email: Optional[EmailStr] = Field(None, description="Email (if creating new contact)")
    contact_type: Optional[ContactType] = Field(None, description="Contact type (if creating new contact)")


class ResolveContactInput(AgencyScopedInput):
    query: str = Field(..., min_length=1, description="Contact ID, name, email or phone")
    type: Optional[ContactType] = Field(None, description="Restrict to a contact type")
    status: Optional[ContactStatus] = Field(None, description="Restrict to a pipeline status")


class ResolvePropertyInput(PriceRangeMixin, AgencyScopedInput):
    query: str = Field(..., min_length=1, description="Property ID, reference or address")
    type: Optional[PropertyType] = Field(None, description="Restrict to a property type")
    status: Optional[PropertyStatus] = Field(None, description="Restrict to a listing status")
    city: Optional[str] = Field(None, description="Restrict to a city (case-insensitive)")


class ListPropertiesInput(PriceRangeMixin, AgencyScopedInput):
    type: Optional[PropertyType] = None
    status: Optional[PropertyStatus] = None
    city: Optional[str] = Field(None, description="City (case-insensitive, partial)")
    min_bedrooms: Optional[int] = Field(None, ge=0)
    owner_id: Optional[str] = None
    search: Optional[str] = Field(None, description="Search reference, street or city")
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class CreateContractInput(AgencyScopedInput):
    type: ContractType = Field(..., description="Contract type")
    property_query: str = Field(..., min_length=1, description="Property ID or reference")
    contact_query: str = Field(..., min_length=1, description="Contact ID or name")


class UpdateContractStatusInput(AgencyScopedInput):
    id: str = Field(..., min_length=1, description="Contract ID")
    status: ContractStatus = Field(..., description="New status")
    notes: Optional[str] = Field(None, description="Notes about the status change")


class SignContractInput(AgencyScopedInput):
    id: str = Field(..., min_length=1, description="Contract ID")
    signed_date: Optional[str] = Field(None, description="Signing date (defaults to today)")
    notes: Optional[str] = Field(None, description="Signing notes")


class GetContractInput(AgencyScopedInput):
    id: str = Field(..., min_length=1, description="Contract ID")


class ListContractsInput(AgencyScopedInput):
    type: Optional[ContractType] = Field(None, description="Filter by contract type")
    status: Optional[ContractStatus] = Field(None, description="Filter by status")
    property_query: Optional[str] = Field(None, description="Filter by property ID or reference")
    contact_query: Optional[str] = Field(None, description="Filter by contact ID or name")
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class PrepareContractInput(NewContactFields, AgencyScopedInput):
    type: ContractType = Field(..., description="Contract type")
    property_query: str = Field(..., min_length=1, description="Property ID or reference")
    contact_query: str = Field(..., min_length=1, description="Contact ID or name")

    commission_rate: Optional[float] = Field(None, ge=0, le=100, description="Commission rate (%)")
    duration_months: Optional[int] = Field(None, gt=0, description="Contract duration in months")
    exclusivity: Optional[bool] = Field(None, description="Exclusive contract?")
    notes: Optional[str] = Field(None, description="Contract notes")

    create_tasks: bool = Field(default=True, description="Create follow-up tasks")


class QuickMandateInput(AgencyScopedInput):
    property_query: str = Field(..., min_length=1, description="Property ID or reference")
    owner_query: str = Field(..., min_length=1, description="Owner contact ID or name")
    commission_rate: float = Field(default=3, ge=0, le=100, description="Commission rate (%)")
    exclusivity: bool = Field(default=False, description="Exclusive mandate?")
    duration_months: int = Field(default=3, gt=0, description="Mandate duration in months")


class DraftEmailInput(AgencyScopedInput):
    email_type: EmailType = Field(..., description="Kind of email to draft")
    contact_query: str = Field(..., min_length=1, description="Recipient contact ID, name or email")
    property_query: Optional[str] = Field(None, description="Property ID or reference")
    visit_id: Optional[str] = Field(None, description="Visit ID for visit emails")
    tone: EmailTone = EmailTone.PROFESSIONAL
    language: EmailLanguage = EmailLanguage.EN
    custom_subject: Optional[str] = None
    custom_message: Optional[str] = Field(None, description="Extra paragraph added to the body")
    include_price: bool = True
    include_characteristics: bool = True


class ScheduleVisitInput(NewContactFields, AgencyScopedInput):
    contact_query: str = Field(..., min_length=1, description="Contact ID or name")
    property_query: str = Field(..., min_length=1, description="Property ID or reference")
    date: NonBlankStr = Field(..., description="Visit date, e.g. 'tomorrow', 'next Monday', '2024-12-20'")
    time: Optional[str] = Field(None, description="Visit time, e.g. '2pm' or '14:00' (default 10:00)")
    duration_minutes: int = Field(default=60, ge=15, le=180, description="Duration in minutes")
    notes: Optional[str] = Field(None, description="Notes for the visit")
    create_reminder: bool = Field(default=True, description="Create a reminder task for the day before")


class QuickRescheduleInput(AgencyScopedInput):
    visit_id: str = Field(..., min_length=1, description="Visit ID")
    new_date: NonBlankStr = Field(..., description="New date")
    new_time: Optional[str] = Field(None, description="New time (keeps the original when omitted)")
    notify: bool = Field(default=True, description="Create a task to notify the client")
