from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from hvacops.core.enums import ASStatus

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"


class ASRequestCreate(BaseModel):
    reception_date: Optional[date] = None
    affiliate: Optional[str] = None
    business_name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    detail_address: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    as_reason: Optional[str] = None
    model_name: Optional[str] = None
    outdoor_unit_location: Optional[str] = None
    notes: Optional[str] = None


class ASRequestUpdate(BaseModel):
    reception_date: Optional[date] = None
    affiliate: Optional[str] = None
    business_name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)
    detail_address: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    as_reason: Optional[str] = None
    model_name: Optional[str] = None
    outdoor_unit_location: Optional[str] = None
    visit_date: Optional[date] = None
    samsung_as_center: Optional[str] = None
    technician_name: Optional[str] = None
    technician_phone: Optional[str] = None
    processing_details: Optional[str] = None
    processed_date: Optional[date] = None
    as_cost: Optional[float] = Field(None, ge=0)
    reception_fee: Optional[float] = Field(None, ge=0)
    settlement_month: Optional[str] = Field(None, pattern=MONTH_PATTERN)
    notes: Optional[str] = None


class ASStatusUpdate(BaseModel):
    status: ASStatus
    settlement_month: Optional[str] = Field(None, pattern=MONTH_PATTERN)


class ASBatchSettlement(BaseModel):
    request_ids: List[int] = Field(..., min_length=1)
    settlement_month: Optional[str] = Field(None, pattern=MONTH_PATTERN)


class ASRequestOut(BaseModel):
    id: int
    reception_date: date
    affiliate: Optional[str] = None
    business_name: str
    address: str
    detail_address: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    as_reason: Optional[str] = None
    model_name: Optional[str] = None
    outdoor_unit_location: Optional[str] = None
    visit_date: Optional[date] = None
    samsung_as_center: Optional[str] = None
    technician_name: Optional[str] = None
    technician_phone: Optional[str] = None
    processing_details: Optional[str] = None
    processed_date: Optional[date] = None
    as_cost: Optional[float] = None
    reception_fee: Optional[float] = None
    total_amount: float
    status: ASStatus
    settlement_month: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ASSettlementSummary(BaseModel):
    """Totals for one settlement month; billed amounts are cut to 1,000 won per affiliate."""
    count: int
    total_as_cost: float
    total_reception_fee: float
    total_amount: float
    by_affiliate: Dict[str, float]
    truncated_total: float
    truncation_diff: float
    total_with_vat: float
