from pydantic import BaseModel
from typing import Dict, List
from datetime import date
from hvacops.core.enums import EquipmentStatusType, ScheduleUrgency
from hvacops.schemas.order import OrderOut


class KanbanBoard(BaseModel):
    today: date
    columns: Dict[str, List[OrderOut]]
    counts: Dict[str, int]


class DeliveryRow(BaseModel):
    order: OrderOut
    delay: Dict[str, int]


class AlertSummary(BaseModel):
    today: date
    counts: Dict[str, int]


class EquipmentBadge(BaseModel):
    type: EquipmentStatusType
    confirmed: int
    total: int


class ScheduleRow(BaseModel):
    order: OrderOut
    urgency: ScheduleUrgency
    equipment: EquipmentBadge
