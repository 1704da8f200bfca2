from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import date, datetime
from hvacops.core.enums import (
    AlertType,
    DeliveryStatus,
    InstallScheduleStatus,
    ItemDeliveryStatus,
    OrderLifecycle,
    OrderStatus,
    SettlementStatus,
    WorkType,
)


class OrderItemIn(BaseModel):
    work_type: WorkType
    category: Optional[str] = None
    model: Optional[str] = None
    size: Optional[str] = None
    quantity: int = Field(1, ge=1)


class OrderItemOut(OrderItemIn):
    id: int
    # imported rows may carry work types outside the intake list
    work_type: str


class EquipmentItemIn(BaseModel):
    set_model: Optional[str] = None
    component_name: str
    component_model: Optional[str] = None
    supplier: Optional[str] = None
    order_number: Optional[str] = None
    order_date: Optional[date] = None
    requested_delivery_date: Optional[date] = None
    scheduled_delivery_date: Optional[date] = None
    confirmed_delivery_date: Optional[date] = None
    quantity: int = Field(1, ge=1)
    unit_price: Optional[float] = Field(None, ge=0)


class EquipmentItemOut(EquipmentItemIn):
    id: int
    supplier: Optional[str] = None
    total_price: Optional[float] = None
    delivery_status: ItemDeliveryStatus


class OrderCreate(BaseModel):
    document_number: Optional[str] = None
    affiliate: str
    business_name: Optional[str] = None
    address: str
    order_date: Optional[date] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    requested_install_date: Optional[date] = None
    notes: Optional[str] = None
    items: List[OrderItemIn] = Field(default_factory=list)
    track_delivery: bool = False


class OrderUpdate(BaseModel):
    document_number: Optional[str] = None
    affiliate: Optional[str] = None
    business_name: Optional[str] = None
    address: Optional[str] = None
    order_date: Optional[date] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    requested_install_date: Optional[date] = None
    notes: Optional[str] = None
    items: Optional[List[OrderItemIn]] = None


class DeliveryInput(BaseModel):
    samsung_order_number: Optional[str] = None
    requested_delivery_date: Optional[date] = None
    confirmed_delivery_date: Optional[date] = None
    equipment_items: Optional[List[EquipmentItemIn]] = None


class ScheduleInput(BaseModel):
    install_schedule_date: Optional[date] = None
    install_complete_date: Optional[date] = None
    install_memo: Optional[str] = None


class CancelRequest(BaseModel):
    reason: str = Field(..., min_length=1)


class SettlementUpdate(BaseModel):
    status: SettlementStatus
    settlement_month: Optional[str] = Field(None, pattern=r"^\d{4}-\d{2}$")


class BatchSettlementUpdate(SettlementUpdate):
    order_ids: List[int] = Field(..., min_length=1)


class OrderOut(BaseModel):
    id: int
    document_number: Optional[str] = None
    affiliate: Optional[str] = None
    business_name: Optional[str] = None
    address: Optional[str] = None
    order_date: Optional[date] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    requested_install_date: Optional[date] = None
    notes: Optional[str] = None

    status: OrderLifecycle
    cancel_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None

    samsung_order_number: Optional[str] = None
    requested_delivery_date: Optional[date] = None
    confirmed_delivery_date: Optional[date] = None
    install_schedule_date: Optional[date] = None
    install_complete_date: Optional[date] = None
    install_memo: Optional[str] = None
    s1_settlement_status: Optional[SettlementStatus] = None
    s1_settlement_month: Optional[str] = None

    items: List[OrderItemOut] = Field(default_factory=list)
    equipment_items: List[EquipmentItemOut] = Field(default_factory=list)

    # recomputed on every read
    kanban_status: OrderStatus
    delivery_status: Optional[DeliveryStatus] = None
    alert_type: AlertType
    install_schedule_status: InstallScheduleStatus
    delivery_progress: Dict[str, int]

    created_at: datetime
    updated_at: Optional[datetime] = None


class OrderImportResult(BaseModel):
    created: List[OrderOut]
    invalid_fields: Dict[int, List[str]]


class RawOrderBatch(BaseModel):
    records: List[Dict[str, Any]] = Field(..., min_length=1)
