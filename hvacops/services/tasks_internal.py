import logging
from datetime import date
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from hvacops.core.config import settings
from hvacops.models.order import Order
from hvacops.services.order_sync import refresh_derived_fields
from hvacops.services.webhook import notify_status_change
from hvacops.utils.dates import business_today

logger = logging.getLogger(__name__)


async def refresh_tracked_orders(db: AsyncSession, today: date) -> dict:
    """Re-store cached statuses for every delivery-tracked order.

    Date-driven delivery status moves without any write to the order (an item
    confirmed for tomorrow arrives overnight), so this runs on a schedule.
    """
    res = await db.execute(
        select(Order)
        .where(Order.delivery_status.is_not(None))
        .options(selectinload(Order.items), selectinload(Order.equipment_items))
    )
    orders = res.scalars().all()

    transitions = []
    for order in orders:
        before = order.delivery_status
        previous_kanban = refresh_derived_fields(order, today)
        if previous_kanban is not None:
            transitions.append((order.id, previous_kanban, order.kanban_status))
        if before != order.delivery_status:
            logger.info(f"Order {order.id} delivery status refreshed: {before} -> {order.delivery_status}")

    await db.commit()

    for order_id, previous, current in transitions:
        await notify_status_change(order_id, previous, current)

    return {"checked": len(orders), "kanban_changed": len(transitions)}


async def refresh_delivery_statuses_async(today: Optional[date] = None) -> dict:
    """Background entry point; owns its own engine like any worker process."""
    engine_worker = create_async_engine(settings.DATABASE_URL, future=True, echo=False)
    session_factory = async_sessionmaker(engine_worker, class_=AsyncSession, expire_on_commit=False)
    try:
        async with session_factory() as db:
            result = await refresh_tracked_orders(db, today or business_today())
        logger.info(f"Delivery status refresh done: {result}")
        return result
    except Exception as e:
        logger.error(f"Delivery status refresh failed: {e}")
        raise
    finally:
        await engine_worker.dispose()
