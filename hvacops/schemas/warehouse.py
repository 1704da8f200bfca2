from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from hvacops.core.enums import EquipmentCondition, ReleaseType, StoredEquipmentStatus


class WarehouseCreate(BaseModel):
    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    manager_name: Optional[str] = None
    manager_phone: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class WarehouseUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = Field(None, min_length=1)
    manager_name: Optional[str] = None
    manager_phone: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class WarehouseOut(WarehouseCreate):
    id: int
    # units currently stored, counted from stored equipment
    current_stock: int
    stock_rate: int
    created_at: datetime


class StoredEquipmentCreate(BaseModel):
    order_id: Optional[int] = None
    warehouse_id: int
    site_name: Optional[str] = None
    affiliate: Optional[str] = None
    address: Optional[str] = None
    category: str = Field(..., min_length=1)
    model: Optional[str] = None
    size: Optional[str] = None
    quantity: int = Field(1, ge=1)
    manufacturer: Optional[str] = None
    manufacturing_date: Optional[str] = Field(None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$")
    storage_start_date: Optional[date] = None
    condition: EquipmentCondition = EquipmentCondition.GOOD
    removal_reason: Optional[str] = None
    notes: Optional[str] = None


class StoredEquipmentUpdate(BaseModel):
    warehouse_id: Optional[int] = None
    site_name: Optional[str] = Field(None, min_length=1)
    affiliate: Optional[str] = None
    address: Optional[str] = None
    category: Optional[str] = Field(None, min_length=1)
    model: Optional[str] = None
    size: Optional[str] = None
    quantity: Optional[int] = Field(None, ge=1)
    manufacturer: Optional[str] = None
    manufacturing_date: Optional[str] = Field(None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$")
    storage_start_date: Optional[date] = None
    condition: Optional[EquipmentCondition] = None
    removal_reason: Optional[str] = None
    notes: Optional[str] = None


class ReleaseInput(BaseModel):
    release_type: ReleaseType = ReleaseType.REINSTALL
    release_date: Optional[date] = None
    release_destination: Optional[str] = None
    release_notes: Optional[str] = None


class StoredEquipmentOut(BaseModel):
    id: int
    order_id: Optional[int] = None
    warehouse_id: int
    warehouse_name: Optional[str] = None
    site_name: str
    affiliate: Optional[str] = None
    address: Optional[str] = None
    category: str
    model: Optional[str] = None
    size: Optional[str] = None
    quantity: int
    manufacturer: Optional[str] = None
    manufacturing_date: Optional[str] = None
    storage_start_date: date
    condition: EquipmentCondition
    removal_reason: Optional[str] = None
    notes: Optional[str] = None
    status: StoredEquipmentStatus
    release_type: Optional[ReleaseType] = None
    release_date: Optional[date] = None
    release_destination: Optional[str] = None
    release_notes: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
