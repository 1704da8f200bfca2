"""Request guards and shared dependencies for the routers"""
from datetime import date
from fastapi import HTTPException, Query
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from hvacops.core.enums import OrderLifecycle
from hvacops.models.order import Order
from hvacops.utils.dates import business_today


def get_today(today: Optional[date] = Query(None, description="Reference date, defaults to the business date")) -> date:
    # one reference date per request so a listing never mixes two days
    return today or business_today()


def check_not_found(item, resource_name: str = "Resource", resource_id: Optional[int] = None) -> None:

    if not item:
        if resource_id:
            raise HTTPException(
                status_code=404,
                detail=f"{resource_name} with id {resource_id} not found"
            )
        raise HTTPException(status_code=404, detail=f"{resource_name} not found")


def check_active(order: Order) -> None:

    if order.status == OrderLifecycle.CANCELLED:
        raise HTTPException(
            status_code=409,
            detail=f"Order {order.id} is cancelled and can no longer be changed"
        )


def order_query():
    return select(Order).options(
        selectinload(Order.items),
        selectinload(Order.equipment_items),
    )


async def load_order(db: AsyncSession, order_id: int) -> Optional[Order]:
    res = await db.execute(
        order_query()
        .where(Order.id == order_id)
        .execution_options(populate_existing=True)
    )
    return res.scalars().first()
