import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from pydantic import ValidationError
from sqlalchemy import Enum, String
from sqlalchemy.ext.asyncio import AsyncSession

from hvacops.core.config import settings
from hvacops.core.dependencies import check_active, check_not_found, get_today, load_order, order_query
from hvacops.core.enums import OrderLifecycle, OrderStatus, SettlementStatus
from hvacops.core.rate_limit import check_rate_limit
from hvacops.core.response_builders import build_order_response, build_order_response_list
from hvacops.db.session import get_db
from hvacops.models.order import EquipmentItem, Order, OrderItem
from hvacops.schemas.fields import OrderFields
from hvacops.schemas.order import (
    BatchSettlementUpdate,
    CancelRequest,
    DeliveryInput,
    EquipmentItemIn,
    OrderCreate,
    OrderImportResult,
    OrderOut,
    OrderUpdate,
    RawOrderBatch,
    ScheduleInput,
    SettlementUpdate,
)
from hvacops.services.order_sync import (
    apply_settlement,
    refresh_derived_fields,
    replace_equipment_items,
    replace_work_items,
    start_delivery_tracking,
)
from hvacops.services.webhook import notify_status_change
from hvacops.utils.case import to_camel_case, to_snake_case
from hvacops.utils.idempotency import get_idempotent, set_idempotent

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/orders", tags=["orders"])

IMPORTED_TEXT_FIELDS = (
    "document_number",
    "affiliate",
    "business_name",
    "address",
    "contact_name",
    "contact_phone",
    "notes",
    "install_memo",
)


def _fit(model, values: dict) -> dict:
    """Trim imported text to the width of its column; numbers are stored as text."""
    columns = model.__table__.columns
    fitted = {}
    for name, value in values.items():
        column_type = columns[name].type if name in columns else None
        if isinstance(column_type, String) and not isinstance(column_type, Enum) and value is not None:
            value = str(value)
            if column_type.length and len(value) > column_type.length:
                logger.warning(f"Imported {model.__tablename__}.{name} cut to {column_type.length} characters")
                value = value[: column_type.length]
        fitted[name] = value
    return fitted


async def _save(db: AsyncSession, order: Order, today: date) -> OrderOut:
    """Re-store derived columns, commit, and answer from a fresh load."""
    previous = refresh_derived_fields(order, today)
    db.add(order)
    await db.commit()

    saved = await load_order(db, order.id)
    if previous is not None:
        await notify_status_change(saved.id, previous, saved.kanban_status)
    return build_order_response(saved, today)


async def _get_order_or_404(db: AsyncSession, order_id: int) -> Order:
    order = await load_order(db, order_id)
    check_not_found(order, "Order", order_id)
    return order


@router.post("/", response_model=OrderOut)
async def create_order(
    payload: OrderCreate,
    request: Request,
    idempotency_key: Optional[str] = Header(None),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    if idempotency_key:
        prev = await get_idempotent(idempotency_key)
        if prev:
            return prev

    order = Order(
        document_number=payload.document_number,
        affiliate=payload.affiliate,
        business_name=payload.business_name,
        address=payload.address,
        order_date=payload.order_date or today,
        contact_name=payload.contact_name,
        contact_phone=payload.contact_phone,
        requested_install_date=payload.requested_install_date,
        notes=payload.notes,
        status=OrderLifecycle.ACTIVE,
        equipment_items=[],
    )
    replace_work_items(order, payload.items)
    if payload.track_delivery:
        start_delivery_tracking(order)

    out = await _save(db, order, today)
    logger.info(f"Order {out.id} received from {payload.affiliate}")

    if idempotency_key:
        await set_idempotent(idempotency_key, out.model_dump(mode="json"))
    return out


@router.post("/import", response_model=OrderImportResult)
async def import_orders(
    payload: RawOrderBatch,
    request: Request,
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    """Ingest loosely typed records (camelCase or snake_case keys, string dates)."""
    await check_rate_limit(request)

    orders = []
    invalid = {}
    for index, record in enumerate(payload.records):
        try:
            fields = OrderFields.from_raw(record)
        except ValidationError as e:
            names = ", ".join(".".join(str(part) for part in err["loc"]) for err in e.errors())
            raise HTTPException(status_code=422, detail=f"Record {index}: unreadable {names}")
        raw = to_snake_case(record)
        if fields.invalid_fields:
            invalid[index] = fields.invalid_fields

        order = Order(
            status=fields.status,
            s1_settlement_status=fields.s1_settlement_status,
            order_date=fields.order_date,
            requested_install_date=fields.requested_install_date,
            install_schedule_date=fields.install_schedule_date,
            install_complete_date=fields.install_complete_date,
            requested_delivery_date=fields.requested_delivery_date,
            confirmed_delivery_date=fields.confirmed_delivery_date,
            delivery_status=fields.delivery_status,
            **_fit(Order, {
                "samsung_order_number": fields.samsung_order_number,
                **{name: raw.get(name) for name in IMPORTED_TEXT_FIELDS},
            }),
        )
        order.items = [
            OrderItem(**_fit(OrderItem, item.model_dump())) for item in fields.items if item.work_type
        ]
        order.equipment_items = [
            EquipmentItem(
                **_fit(EquipmentItem, {
                    **item.model_dump(),
                    "component_name": item.component_name or "기타",
                    "supplier": settings.DEFAULT_SUPPLIER,
                }),
                total_price=item.unit_price * item.quantity if item.unit_price is not None else None,
            )
            for item in fields.equipment_items
        ]
        if order.status == OrderLifecycle.CANCELLED:
            order.cancelled_at = datetime.now(timezone.utc)

        refresh_derived_fields(order, today)
        db.add(order)
        orders.append(order)

    await db.commit()
    logger.info(f"Imported {len(orders)} orders, {len(invalid)} with unreadable values")

    created = [await load_order(db, order.id) for order in orders]
    return OrderImportResult(
        created=build_order_response_list(created, today),
        invalid_fields=invalid,
    )


@router.get("/", response_model=List[OrderOut])
async def list_orders(
    kanban_status: Optional[OrderStatus] = Query(None),
    affiliate: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    q = order_query()

    # the stored column is only an index; responses recompute from source fields
    if kanban_status:
        q = q.where(Order.kanban_status == kanban_status)
    if affiliate:
        q = q.where(Order.affiliate == affiliate)

    q = q.order_by(Order.created_at.desc(), Order.id.desc()).limit(limit).offset(offset)
    res = await db.execute(q)
    orders = res.scalars().all()

    return build_order_response_list(orders, today)


@router.get("/export")
async def export_orders(
    affiliate: Optional[str] = Query(None),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    """All orders as camelCase records, the shape accepted back by ``/orders/import``."""
    q = order_query().order_by(Order.id)
    if affiliate:
        q = q.where(Order.affiliate == affiliate)
    res = await db.execute(q)

    return [
        to_camel_case(out.model_dump(mode="json"))
        for out in build_order_response_list(res.scalars().all(), today)
    ]


@router.get("/{order_id}", response_model=OrderOut)
async def get_order(
    order_id: int,
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    order = await _get_order_or_404(db, order_id)
    return build_order_response(order, today)


@router.put("/{order_id}", response_model=OrderOut)
async def update_order(
    order_id: int,
    payload: OrderUpdate,
    request: Request,
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    """Update an order's intake fields"""
    await check_rate_limit(request)

    order = await _get_order_or_404(db, order_id)
    check_active(order)

    updates = payload.model_dump(exclude_unset=True, exclude={"items"})
    for field, value in updates.items():
        setattr(order, field, value)
    if payload.items is not None:
        replace_work_items(order, payload.items)

    return await _save(db, order, today)


@router.delete("/{order_id}")
async def delete_order(
    order_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    order = await _get_order_or_404(db, order_id)

    await db.delete(order)
    await db.commit()

    return {"deleted": True}


@router.post("/{order_id}/cancel", response_model=OrderOut)
async def cancel_order(
    order_id: int,
    payload: CancelRequest,
    request: Request,
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    order = await _get_order_or_404(db, order_id)
    check_active(order)

    order.status = OrderLifecycle.CANCELLED
    order.cancel_reason = payload.reason
    order.cancelled_at = datetime.now(timezone.utc)

    arrived = [item for item in order.equipment_items if item.confirmed_delivery_date]
    if arrived:
        logger.warning(
            f"Order {order_id} cancelled with {len(arrived)} components already in a warehouse"
        )

    return await _save(db, order, today)


@router.put("/{order_id}/equipment", response_model=OrderOut)
async def replace_equipment(
    order_id: int,
    payload: List[EquipmentItemIn],
    request: Request,
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    order = await _get_order_or_404(db, order_id)
    check_active(order)

    replace_equipment_items(order, payload)
    return await _save(db, order, today)


@router.put("/{order_id}/delivery", response_model=OrderOut)
async def update_delivery(
    order_id: int,
    payload: DeliveryInput,
    request: Request,
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    """Vendor order number, delivery dates and components; starts delivery tracking."""
    await check_rate_limit(request)

    order = await _get_order_or_404(db, order_id)
    check_active(order)

    updates = payload.model_dump(exclude_unset=True, exclude={"equipment_items"})
    for field, value in updates.items():
        setattr(order, field, value)
    if payload.equipment_items is not None:
        replace_equipment_items(order, payload.equipment_items)
    start_delivery_tracking(order)

    return await _save(db, order, today)


@router.put("/{order_id}/schedule", response_model=OrderOut)
async def update_schedule(
    order_id: int,
    payload: ScheduleInput,
    request: Request,
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    order = await _get_order_or_404(db, order_id)
    check_active(order)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(order, field, value)

    return await _save(db, order, today)


@router.put("/{order_id}/settlement", response_model=OrderOut)
async def update_settlement(
    order_id: int,
    payload: SettlementUpdate,
    request: Request,
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    order = await _get_order_or_404(db, order_id)
    check_active(order)

    apply_settlement(order, payload.status, payload.settlement_month, today)
    return await _save(db, order, today)


@router.post("/settlement/batch", response_model=List[OrderOut])
async def batch_update_settlement(
    payload: BatchSettlementUpdate,
    request: Request,
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    res = await db.execute(order_query().where(Order.id.in_(payload.order_ids)))
    orders = {order.id: order for order in res.scalars().all()}

    missing = sorted(set(payload.order_ids) - set(orders))
    if missing:
        raise HTTPException(status_code=404, detail=f"Orders not found: {missing}")

    transitions = []
    for order_id in payload.order_ids:
        order = orders[order_id]
        check_active(order)
        apply_settlement(order, payload.status, payload.settlement_month, today)
        previous = refresh_derived_fields(order, today)
        if previous is not None:
            transitions.append((order_id, previous, order.kanban_status))

    await db.commit()
    for order_id, previous, current in transitions:
        await notify_status_change(order_id, previous, current)

    reloaded = [await load_order(db, order_id) for order_id in payload.order_ids]
    return build_order_response_list(reloaded, today)


@router.post("/{order_id}/settlement/revert", response_model=OrderOut)
async def revert_settlement(
    order_id: int,
    request: Request,
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    order = await _get_order_or_404(db, order_id)
    check_active(order)

    if order.s1_settlement_status != SettlementStatus.SETTLED:
        raise HTTPException(status_code=409, detail=f"Order {order_id} is not settled")

    order.s1_settlement_status = SettlementStatus.IN_PROGRESS
    order.s1_settlement_month = None
    return await _save(db, order, today)
