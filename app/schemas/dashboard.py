from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from app.schemas.common import UTCDateTime


class TimeFrame(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class DashboardFilter(BaseModel):
    time_frame: TimeFrame = TimeFrame.MONTH
    client_id: Optional[str] = None
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None


class ClientSummary(BaseModel):
    id: str
    name: str
    total_hours: float
    total_earnings: float
    total_mileage: float
    total_mileage_amount: float


class PeriodSummary(BaseModel):
    period: str
    total_hours: float
    total_earnings: float
    total_mileage: float
    total_mileage_amount: float


class InvoiceStatusSummary(BaseModel):
    status: str
    count: int
    total: float


class DashboardSummary(BaseModel):
    start_date: datetime
    end_date: datetime
    total_hours: float
    total_earnings: float
    total_hst: float
    total_mileage: float
    total_mileage_amount: float
    total_invoiced: float
    total_paid: float
    total_unpaid: float
    client_summaries: List[ClientSummary]
    period_summaries: List[PeriodSummary]
    invoice_status_summaries: List[InvoiceStatusSummary]
