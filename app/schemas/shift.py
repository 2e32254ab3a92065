from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.models.shift import ShiftType
from app.schemas.client import ClientResponse
from app.schemas.common import UTCDateTime


class ShiftCreate(BaseModel):
    client_id: str
    start_time: UTCDateTime
    end_time: UTCDateTime
    shift_type: ShiftType = ShiftType.REGULAR
    # Falls back to the user's default hourly rate
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None
    location: Optional[str] = None
    use_client_location: bool = False


class ShiftUpdate(BaseModel):
    client_id: Optional[str] = None
    start_time: Optional[UTCDateTime] = None
    end_time: Optional[UTCDateTime] = None
    shift_type: Optional[ShiftType] = None
    hourly_rate: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None
    location: Optional[str] = None
    use_client_location: bool = False


class ShiftResponse(BaseModel):
    id: str
    user_id: str
    client_id: str
    start_time: datetime
    end_time: datetime
    shift_type: ShiftType
    hourly_rate: float
    total_hours: float
    earnings: float
    hst_amount: float
    notes: Optional[str] = None
    location: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_invoiced: bool
    created_at: Optional[datetime] = None
    client: Optional[ClientResponse] = None

    class Config:
        from_attributes = True
