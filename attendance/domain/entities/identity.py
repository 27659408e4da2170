"""Identity and attendance domain entities."""
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class Identity(BaseModel):
    """An enrolled person."""
    external_id: str = Field(..., description="Upper-cased enrollment identifier")
    display_name: str = Field(..., description="Name shown for this person")

    model_config = ConfigDict(from_attributes=True)


class AttendanceRecord(BaseModel):
    """A single attendance event."""
    id: int = Field(..., description="Autoincrement record identifier")
    external_id: str = Field(..., description="Enrollment identifier of the attendee")
    timestamp: datetime = Field(..., description="When the attendee was recognized")

    model_config = ConfigDict(from_attributes=True)


class DailyAttendance(BaseModel):
    """Number of attendance events recorded on one calendar day."""
    day: date
    count: int = Field(..., ge=0)
