"""Write-side helpers that keep an order's cached status columns in step.

Every code path that changes an order's source fields calls
``refresh_derived_fields`` before committing.
"""
import logging
from datetime import date
from typing import Iterable, Optional

from hvacops.core.config import settings
from hvacops.core.enums import DeliveryStatus, OrderStatus, SettlementStatus
from hvacops.core.metrics import status_recomputations
from hvacops.models.order import EquipmentItem, Order, OrderItem
from hvacops.schemas.fields import OrderFields
from hvacops.schemas.order import EquipmentItemIn, OrderItemIn
from hvacops.services.status_rules import compute_delivery_status, compute_kanban_status
from hvacops.utils.dates import current_month

logger = logging.getLogger(__name__)


def refresh_derived_fields(order: Order, today: date) -> Optional[OrderStatus]:
    """Recompute and store ``kanban_status`` and, for tracked orders, ``delivery_status``.

    Returns the previous kanban status when an existing status changed,
    otherwise None.
    """
    fields = OrderFields.from_record(order)

    kanban = compute_kanban_status(fields)
    previous = order.kanban_status
    changed = previous != kanban
    status_recomputations.labels(kind="kanban", changed=str(changed).lower()).inc()
    order.kanban_status = kanban

    if fields.tracks_delivery:
        delivery = compute_delivery_status(fields, today)
        delivery_changed = order.delivery_status != delivery
        status_recomputations.labels(kind="delivery", changed=str(delivery_changed).lower()).inc()
        if delivery_changed:
            logger.info(f"Order {order.id} delivery status {order.delivery_status} -> {delivery}")
        order.delivery_status = delivery

    if changed and previous is not None:
        logger.info(f"Order {order.id} kanban status {previous} -> {kanban}")
        return previous
    return None


def start_delivery_tracking(order: Order) -> None:
    if order.delivery_status is None:
        order.delivery_status = DeliveryStatus.PENDING


def replace_work_items(order: Order, items: Iterable[OrderItemIn]) -> None:
    order.items = [
        OrderItem(
            work_type=str(item.work_type),
            category=item.category,
            model=item.model,
            size=item.size,
            quantity=item.quantity,
        )
        for item in items
    ]


def replace_equipment_items(order: Order, items: Iterable[EquipmentItemIn]) -> None:
    """Full replacement; totals are derived from quantity and unit price."""
    rows = []
    for item in items:
        data = item.model_dump()
        data["supplier"] = data.get("supplier") or settings.DEFAULT_SUPPLIER
        data["total_price"] = (
            item.unit_price * item.quantity if item.unit_price is not None else None
        )
        rows.append(EquipmentItem(**data))
    order.equipment_items = rows


def apply_settlement(
    order: Order,
    status: SettlementStatus,
    settlement_month: Optional[str],
    today: date,
) -> None:
    order.s1_settlement_status = status
    if status == SettlementStatus.SETTLED:
        order.s1_settlement_month = settlement_month or current_month(today)
    elif status == SettlementStatus.UNSETTLED:
        order.s1_settlement_month = None
