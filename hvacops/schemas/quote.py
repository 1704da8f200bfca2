from pydantic import BaseModel, Field
from typing import List, Optional


class EquipmentQuoteLine(BaseModel):
    model: str
    quantity: int = Field(1, ge=1)


class InstallationQuoteLine(BaseModel):
    item_name: str
    unit_price: float = Field(..., ge=0)
    quantity: int = Field(1, ge=1)


class QuoteRequest(BaseModel):
    equipment: List[EquipmentQuoteLine] = Field(default_factory=list)
    installation: List[InstallationQuoteLine] = Field(default_factory=list)


class QuoteLine(BaseModel):
    item_name: str
    category: str
    model: Optional[str] = None
    quantity: int
    unit_price: float
    total_price: float


class QuoteResponse(BaseModel):
    items: List[QuoteLine]
    supply_amount: float
    vat_amount: float
    total_amount: float
