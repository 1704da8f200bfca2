from typing import Dict, Iterable

from hvacops.core.enums import ItemDeliveryStatus
from hvacops.schemas.fields import EquipmentItemFields, OrderFields
from hvacops.utils.dates import days_diff


def compute_item_delivery_status(item: EquipmentItemFields) -> ItemDeliveryStatus:
    if item.confirmed_delivery_date:
        return ItemDeliveryStatus.CONFIRMED
    if item.scheduled_delivery_date:
        return ItemDeliveryStatus.SCHEDULED
    if item.order_date or (item.order_number and item.order_number.strip()):
        return ItemDeliveryStatus.ORDERED
    return ItemDeliveryStatus.NONE


def compute_delivery_progress(order: OrderFields) -> Dict[str, int]:
    items = order.equipment_items or []
    confirmed = 0
    scheduled = 0
    for item in items:
        status = compute_item_delivery_status(item)
        if status == ItemDeliveryStatus.CONFIRMED:
            confirmed += 1
        elif status == ItemDeliveryStatus.SCHEDULED:
            scheduled += 1
    return {"total": len(items), "confirmed": confirmed, "scheduled": scheduled}


def analyze_delivery_delay(items: Iterable[EquipmentItemFields]) -> Dict[str, int]:
    """Compare each item's vendor scheduled date against the date we asked for.

    Items missing either date are counted under ``no_date``.
    """
    result = {"total": 0, "normal": 0, "delayed": 0, "no_date": 0, "max_delay_days": 0}
    for item in items or []:
        result["total"] += 1
        requested = item.requested_delivery_date
        scheduled = item.scheduled_delivery_date
        if not requested or not scheduled:
            result["no_date"] += 1
            continue

        diff = days_diff(scheduled, requested)
        if diff <= 0:
            result["normal"] += 1
        else:
            result["delayed"] += 1
            result["max_delay_days"] = max(result["max_delay_days"], diff)
    return result
