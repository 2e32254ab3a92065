from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from app.models.invoice import InvoiceStatus
from app.schemas.client import ClientResponse
from app.schemas.common import UTCDateTime
from app.schemas.mileage import MileageResponse
from app.schemas.shift import ShiftResponse


class InvoiceCreate(BaseModel):
    client_id: str
    shift_ids: List[str] = []
    mileage_ids: List[str] = []
    issue_date: Optional[UTCDateTime] = None
    due_date: Optional[UTCDateTime] = None
    notes: Optional[str] = None


class InvoiceUpdate(BaseModel):
    """Partial update. Only fields present in the request are applied."""

    issue_date: Optional[UTCDateTime] = None
    due_date: Optional[UTCDateTime] = None
    status: Optional[InvoiceStatus] = None
    notes: Optional[str] = None
    payment_notes: Optional[str] = None
    shift_ids: Optional[List[str]] = None
    mileage_ids: Optional[List[str]] = None


class MarkAsPaidRequest(BaseModel):
    payment_notes: Optional[str] = None


class InvoiceResponse(BaseModel):
    id: str
    invoice_number: str
    issue_date: datetime
    due_date: Optional[datetime] = None
    status: InvoiceStatus
    hours_total: float
    earnings_total: float
    mileage_total: float
    hst_total: float
    grand_total: float
    notes: Optional[str] = None
    payment_notes: Optional[str] = None
    payment_proof_filename: Optional[str] = None
    user_id: str
    client_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    client: Optional[ClientResponse] = None
    shifts: Optional[List[ShiftResponse]] = None
    mileages: Optional[List[MileageResponse]] = None

    class Config:
        from_attributes = True


class InvoiceSummaryResponse(BaseModel):
    """Listing view without the claimed shifts and mileages."""

    id: str
    invoice_number: str
    issue_date: datetime
    due_date: Optional[datetime] = None
    status: InvoiceStatus
    hours_total: float
    earnings_total: float
    mileage_total: float
    hst_total: float
    grand_total: float
    notes: Optional[str] = None
    payment_notes: Optional[str] = None
    payment_proof_filename: Optional[str] = None
    user_id: str
    client_id: str
    created_at: Optional[datetime] = None
    client: Optional[ClientResponse] = None

    class Config:
        from_attributes = True
