"""Derived order statuses.

All functions here are pure: they read an ``OrderFields`` and, where dates
matter, a caller supplied ``today``. Persisted status columns are never read.
"""
from datetime import date
from typing import Dict, Iterable, Optional

from hvacops.core.enums import (
    AlertType,
    DeliveryStatus,
    OrderLifecycle,
    OrderStatus,
    SettlementStatus,
)
from hvacops.schemas.fields import OrderFields
from hvacops.utils.dates import days_diff


def compute_kanban_status(order: OrderFields) -> OrderStatus:
    # First match wins; later-stage facts outrank earlier ones.
    if order.status == OrderLifecycle.CANCELLED:
        return OrderStatus.CANCELLED
    if order.s1_settlement_status == SettlementStatus.SETTLED:
        return OrderStatus.SETTLED
    if order.install_complete_date:
        return OrderStatus.COMPLETED
    if order.install_schedule_date:
        return OrderStatus.IN_PROGRESS
    return OrderStatus.RECEIVED


def all_items_arrived(order: OrderFields, today: date) -> bool:
    items = order.equipment_items or []
    if not items:
        return False
    return all(
        item.confirmed_delivery_date is not None and item.confirmed_delivery_date <= today
        for item in items
    )


def compute_delivery_status(order: OrderFields, today: date) -> DeliveryStatus:
    if all_items_arrived(order, today):
        return DeliveryStatus.DELIVERED

    order_number = (order.samsung_order_number or "").strip()
    if order_number and order.confirmed_delivery_date:
        return DeliveryStatus.IN_TRANSIT

    return DeliveryStatus.PENDING


def effective_delivery_date(order: OrderFields) -> Optional[date]:
    """Vendor confirmed date when known, else the requested one."""
    return order.confirmed_delivery_date or order.requested_delivery_date


def get_alert_type(order: OrderFields, today: date) -> AlertType:
    if order.status == OrderLifecycle.CANCELLED:
        return AlertType.NONE
    if compute_delivery_status(order, today) == DeliveryStatus.DELIVERED:
        return AlertType.NONE

    target = effective_delivery_date(order)
    if target is None:
        return AlertType.NONE

    diff = days_diff(target, today)
    if diff < 0:
        return AlertType.DELAYED
    if diff == 0:
        return AlertType.TODAY
    if diff == 1:
        return AlertType.TOMORROW
    return AlertType.NONE


def summarize_alerts(orders: Iterable[OrderFields], today: date) -> Dict[AlertType, int]:
    counts = {alert: 0 for alert in AlertType}
    for order in orders:
        counts[get_alert_type(order, today)] += 1
    return counts
