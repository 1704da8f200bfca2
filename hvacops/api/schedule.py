from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hvacops.core.dependencies import get_today, order_query
from hvacops.core.enums import InstallScheduleStatus, OrderLifecycle
from hvacops.core.response_builders import build_order_response
from hvacops.db.session import get_db
from hvacops.models.order import Order
from hvacops.schemas.board import EquipmentBadge, ScheduleRow
from hvacops.schemas.fields import OrderFields
from hvacops.services.schedule import (
    filter_orders_by_schedule_status,
    get_equipment_status,
    get_schedule_urgency,
    sort_orders_by_schedule_tab,
)

router = APIRouter(prefix="/schedule", tags=["schedule"])


@router.get("/", response_model=List[ScheduleRow])
async def schedule_tab(
    tab: InstallScheduleStatus = Query(InstallScheduleStatus.UNSCHEDULED),
    affiliate: Optional[str] = Query(None),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    q = order_query().where(Order.status == OrderLifecycle.ACTIVE).order_by(Order.id)
    if affiliate:
        q = q.where(Order.affiliate == affiliate)
    res = await db.execute(q)
    orders = {order.id: order for order in res.scalars().all()}

    fields = [OrderFields.from_record(order) for order in orders.values()]
    selected = sort_orders_by_schedule_tab(filter_orders_by_schedule_status(fields, tab), tab)

    return [
        ScheduleRow(
            order=build_order_response(orders[f.id], today, f),
            urgency=get_schedule_urgency(f, today),
            equipment=EquipmentBadge(**get_equipment_status(f)),
        )
        for f in selected
    ]
