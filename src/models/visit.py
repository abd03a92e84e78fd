"""Visit model - a scheduled property viewing."""

from typing import Optional
from pydantic import BaseModel, Field


class Visit(BaseModel):
    """Scheduled property viewing."""
    id: str = Field(..., description="Visit ID")
    agency_id: str = Field(..., description="Owning agency (tenant) ID")
    property_id: Optional[str] = None
    contact_id: Optional[str] = None
    date: Optional[str] = Field(None, description="Visit date (YYYY-MM-DD)")
    start_time: Optional[str] = Field(None, description="Start time (HH:MM)")
    end_time: Optional[str] = Field(None, description="End time (HH:MM)")
    status: str = Field(default="scheduled", description="scheduled, confirmed, completed, cancelled")
    confirmation_status: Optional[str] = Field(None, description="pending, confirmed, declined")
    notes: Optional[str] = None
