from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.client import ClientResponse
from app.schemas.common import UTCDateTime


class MileageCreate(BaseModel):
    client_id: str
    date: UTCDateTime
    distance: float
    # Falls back to the user's default mileage rate
    rate_per_km: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None
    from_location: Optional[str] = None
    to_location: Optional[str] = None


class MileageUpdate(BaseModel):
    client_id: Optional[str] = None
    date: Optional[UTCDateTime] = None
    distance: Optional[float] = None
    rate_per_km: Optional[float] = Field(default=None, ge=0)
    description: Optional[str] = None
    from_location: Optional[str] = None
    to_location: Optional[str] = None


class MileageResponse(BaseModel):
    id: str
    user_id: str
    client_id: str
    date: datetime
    distance: float
    rate_per_km: float
    amount: float
    description: Optional[str] = None
    from_location: Optional[str] = None
    to_location: Optional[str] = None
    is_invoiced: bool
    created_at: Optional[datetime] = None
    client: Optional[ClientResponse] = None

    class Config:
        from_attributes = True
