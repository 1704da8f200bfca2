import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from hvacops.core.dependencies import get_today, order_query
from hvacops.core.enums import AlertType, DeliveryStatus, OrderLifecycle
from hvacops.core.metrics import delivery_alerts
from hvacops.core.rate_limit import check_rate_limit
from hvacops.core.response_builders import build_order_response
from hvacops.db.session import get_db
from hvacops.models.order import Order
from hvacops.schemas.board import AlertSummary, DeliveryRow
from hvacops.schemas.fields import OrderFields
from hvacops.services.delivery import analyze_delivery_delay
from hvacops.services.status_rules import compute_delivery_status, get_alert_type, summarize_alerts
from hvacops.services.tasks import refresh_delivery_statuses

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/delivery", tags=["delivery"])


async def _tracked_orders(db: AsyncSession) -> list:
    res = await db.execute(
        order_query()
        .where(Order.delivery_status.is_not(None))
        .where(Order.status == OrderLifecycle.ACTIVE)
        .order_by(Order.id)
    )
    return res.scalars().all()


@router.get("/", response_model=List[DeliveryRow])
async def list_deliveries(
    delivery_status: Optional[DeliveryStatus] = Query(None),
    alert: Optional[AlertType] = Query(None),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    rows = []
    for order in await _tracked_orders(db):
        fields = OrderFields.from_record(order)
        if delivery_status and compute_delivery_status(fields, today) != delivery_status:
            continue
        if alert and get_alert_type(fields, today) != alert:
            continue
        rows.append(DeliveryRow(
            order=build_order_response(order, today, fields),
            delay=analyze_delivery_delay(fields.equipment_items),
        ))
    return rows


@router.get("/alerts", response_model=AlertSummary)
async def alert_summary(
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    orders = [OrderFields.from_record(order) for order in await _tracked_orders(db)]
    counts = summarize_alerts(orders, today)

    for alert, count in counts.items():
        delivery_alerts.labels(alert=str(alert)).set(count)

    return AlertSummary(today=today, counts={str(alert): count for alert, count in counts.items()})


@router.post("/refresh")
async def queue_refresh(
    request: Request,
    today: Optional[date] = Query(None),
):
    """Queue a background recompute of the cached delivery status column."""
    await check_rate_limit(request)

    refresh_delivery_statuses.delay(today.isoformat() if today else None)
    logger.info("Delivery status refresh queued")

    return {"status": "queued"}
