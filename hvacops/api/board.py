from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hvacops.core.dependencies import get_today, order_query
from hvacops.core.enums import OrderStatus
from hvacops.core.response_builders import build_order_response
from hvacops.db.session import get_db
from hvacops.models.order import Order
from hvacops.schemas.board import KanbanBoard
from hvacops.schemas.fields import OrderFields
from hvacops.services.status_rules import compute_kanban_status

router = APIRouter(prefix="/board", tags=["board"])


@router.get("/", response_model=KanbanBoard)
async def kanban_board(
    affiliate: Optional[str] = Query(None),
    include_cancelled: bool = Query(False),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    """Orders grouped into workflow columns, classified from source fields."""
    q = order_query().order_by(Order.created_at.desc(), Order.id.desc())
    if affiliate:
        q = q.where(Order.affiliate == affiliate)
    res = await db.execute(q)

    columns = {str(status): [] for status in OrderStatus if include_cancelled or status != OrderStatus.CANCELLED}
    for order in res.scalars().all():
        fields = OrderFields.from_record(order)
        column = str(compute_kanban_status(fields))
        if column not in columns:
            continue
        columns[column].append(build_order_response(order, today, fields))

    return KanbanBoard(
        today=today,
        columns=columns,
        counts={name: len(orders) for name, orders in columns.items()},
    )
