from pydantic import BaseModel, Field
from typing import List, Optional


class ComponentIn(BaseModel):
    model: str
    type: str
    unit_price: float = Field(0.0, ge=0)
    sale_price: float = Field(0.0, ge=0)
    quantity: int = Field(1, ge=1)


class PriceTableRowCreate(BaseModel):
    category: str
    model: str
    size: Optional[str] = None
    price: float = Field(..., ge=0)
    components: List[ComponentIn] = Field(default_factory=list)


class PriceTableRowUpdate(BaseModel):
    category: Optional[str] = None
    model: Optional[str] = None
    size: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    components: Optional[List[ComponentIn]] = None


class ComponentOut(ComponentIn):
    id: int


class PriceTableRowOut(BaseModel):
    id: int
    category: str
    model: str
    size: Optional[str] = None
    price: float
    components: List[ComponentOut]
