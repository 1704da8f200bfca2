"""Installation schedule tabs, urgency and equipment arrival badges"""
from datetime import date
from typing import Dict, List, Sequence, Union

from hvacops.core.enums import (
    EquipmentStatusType,
    InstallScheduleStatus,
    OrderStatus,
    ScheduleUrgency,
    WorkType,
)
from hvacops.schemas.fields import OrderFields
from hvacops.services.status_rules import compute_kanban_status
from hvacops.utils.dates import days_diff

_EARLIEST = date.min
_LATEST = date.max


def has_new_install(order: OrderFields) -> bool:
    return any(item.work_type == WorkType.NEW_INSTALL for item in order.items)


def compute_install_schedule_status(order: OrderFields) -> InstallScheduleStatus:
    if order.install_complete_date:
        return InstallScheduleStatus.COMPLETED
    if compute_kanban_status(order) == OrderStatus.IN_PROGRESS and order.install_schedule_date:
        return InstallScheduleStatus.SCHEDULED
    return InstallScheduleStatus.UNSCHEDULED


def get_equipment_status(order: OrderFields) -> Dict[str, Union[str, int]]:
    """Arrival badge for new installations: how many components are in."""
    items = order.equipment_items or []
    confirmed = sum(1 for item in items if item.confirmed_delivery_date)
    total = len(items)

    if not has_new_install(order):
        kind = EquipmentStatusType.NOT_APPLICABLE
    elif total == 0:
        kind = EquipmentStatusType.NO_ITEMS
    elif confirmed >= total:
        kind = EquipmentStatusType.ALL_DELIVERED
    else:
        kind = EquipmentStatusType.PARTIAL

    return {"type": kind, "confirmed": confirmed, "total": total}


def get_schedule_urgency(order: OrderFields, today: date) -> ScheduleUrgency:
    if order.install_schedule_date and not order.install_complete_date:
        diff = days_diff(order.install_schedule_date, today)
        if diff < 0:
            return ScheduleUrgency.OVERDUE
        if diff == 0:
            return ScheduleUrgency.TODAY
        if diff == 1:
            return ScheduleUrgency.TOMORROW

    if has_new_install(order) and not order.install_complete_date:
        kind = get_equipment_status(order)["type"]
        if kind not in (EquipmentStatusType.ALL_DELIVERED, EquipmentStatusType.NOT_APPLICABLE):
            return ScheduleUrgency.NO_EQUIPMENT

    return ScheduleUrgency.NONE


def filter_orders_by_schedule_status(
    orders: Sequence[OrderFields],
    status: InstallScheduleStatus,
) -> List[OrderFields]:
    # settled orders only show up in the completed tab
    result = []
    for order in orders:
        if status != InstallScheduleStatus.COMPLETED and compute_kanban_status(order) == OrderStatus.SETTLED:
            continue
        if compute_install_schedule_status(order) == status:
            result.append(order)
    return result


def sort_orders_by_schedule_tab(
    orders: Sequence[OrderFields],
    status: InstallScheduleStatus,
) -> List[OrderFields]:
    if status == InstallScheduleStatus.UNSCHEDULED:
        return sorted(orders, key=lambda o: o.order_date or _EARLIEST, reverse=True)
    if status == InstallScheduleStatus.SCHEDULED:
        return sorted(orders, key=lambda o: o.install_schedule_date or _LATEST)
    return sorted(orders, key=lambda o: o.install_complete_date or _EARLIEST, reverse=True)
