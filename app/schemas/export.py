from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from app.schemas.common import UTCDateTime


class ExportType(str, Enum):
    PDF = "pdf"
    EXCEL = "excel"


class ExportDataType(str, Enum):
    SHIFTS = "shifts"
    MILEAGES = "mileages"
    INVOICE = "invoice"
    EARNINGS_SUMMARY = "earnings_summary"


class ExportRequest(BaseModel):
    export_type: ExportType
    data_type: ExportDataType
    client_id: Optional[str] = None
    invoice_id: Optional[str] = None
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None
    ids: Optional[List[str]] = None
