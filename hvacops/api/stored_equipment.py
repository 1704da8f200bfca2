import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from hvacops.core.dependencies import check_not_found, get_today
from hvacops.core.enums import StoredEquipmentStatus
from hvacops.core.rate_limit import check_rate_limit
from hvacops.core.response_builders import (
    build_stored_equipment_response,
    build_stored_equipment_response_list,
)
from hvacops.db.session import get_db
from hvacops.models.order import Order
from hvacops.models.warehouse import StoredEquipment, Warehouse
from hvacops.schemas.warehouse import (
    ReleaseInput,
    StoredEquipmentCreate,
    StoredEquipmentOut,
    StoredEquipmentUpdate,
)
from hvacops.services.storage import (
    ReleaseStateError,
    release_equipment,
    revert_release,
    search_stored_equipment,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/stored-equipment", tags=["stored-equipment"])


def _equipment_query():
    return select(StoredEquipment).options(selectinload(StoredEquipment.warehouse))


async def _load_equipment(db: AsyncSession, item_id: int) -> Optional[StoredEquipment]:
    res = await db.execute(
        _equipment_query().where(StoredEquipment.id == item_id).execution_options(populate_existing=True)
    )
    return res.scalars().first()


async def _get_equipment_or_404(db: AsyncSession, item_id: int) -> StoredEquipment:
    item = await _load_equipment(db, item_id)
    check_not_found(item, "Stored equipment", item_id)
    return item


async def _check_warehouse(db: AsyncSession, warehouse_id: int) -> None:
    check_not_found(await db.get(Warehouse, warehouse_id), "Warehouse", warehouse_id)


@router.get("/", response_model=List[StoredEquipmentOut])
async def list_stored_equipment(
    status: Optional[StoredEquipmentStatus] = Query(None),
    warehouse_id: Optional[int] = Query(None),
    affiliate: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    order_id: Optional[int] = Query(None),
    q: Optional[str] = Query(None, description="Matches category, model, site, address and maker"),
    db: AsyncSession = Depends(get_db),
):
    query = _equipment_query()
    if status:
        query = query.where(StoredEquipment.status == status)
    if warehouse_id:
        query = query.where(StoredEquipment.warehouse_id == warehouse_id)
    if affiliate:
        query = query.where(StoredEquipment.affiliate == affiliate)
    if category:
        query = query.where(StoredEquipment.category == category)
    if order_id:
        query = query.where(StoredEquipment.order_id == order_id)

    res = await db.execute(query.order_by(StoredEquipment.storage_start_date.desc(), StoredEquipment.id.desc()))
    return build_stored_equipment_response_list(search_stored_equipment(res.scalars().all(), q))


@router.get("/{item_id}", response_model=StoredEquipmentOut)
async def get_stored_equipment(item_id: int, db: AsyncSession = Depends(get_db)):
    return build_stored_equipment_response(await _get_equipment_or_404(db, item_id))


@router.post("/", response_model=StoredEquipmentOut)
async def create_stored_equipment(
    payload: StoredEquipmentCreate,
    request: Request,
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    """Register removed equipment; an ``order_id`` fills the site details from that order."""
    await check_rate_limit(request)
    await _check_warehouse(db, payload.warehouse_id)

    data = payload.model_dump()
    if payload.order_id is not None:
        order = await db.get(Order, payload.order_id)
        check_not_found(order, "Order", payload.order_id)
        data["site_name"] = data["site_name"] or order.business_name
        data["affiliate"] = data["affiliate"] or order.affiliate
        data["address"] = data["address"] or order.address
    if not (data["site_name"] or "").strip():
        raise HTTPException(status_code=422, detail="site_name is required without an order to copy it from")

    item = StoredEquipment(
        **{**data, "storage_start_date": payload.storage_start_date or today},
        status=StoredEquipmentStatus.STORED,
    )
    db.add(item)
    await db.commit()
    logger.info(f"Stored {item.quantity} x {item.category} from {item.site_name} in warehouse {item.warehouse_id}")

    return build_stored_equipment_response(await _load_equipment(db, item.id))


@router.put("/{item_id}", response_model=StoredEquipmentOut)
async def update_stored_equipment(
    item_id: int,
    payload: StoredEquipmentUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    item = await _get_equipment_or_404(db, item_id)
    if payload.warehouse_id is not None and payload.warehouse_id != item.warehouse_id:
        await _check_warehouse(db, payload.warehouse_id)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(item, field, value)

    db.add(item)
    await db.commit()

    return build_stored_equipment_response(await _load_equipment(db, item_id))


@router.post("/{item_id}/release", response_model=StoredEquipmentOut)
async def release_stored_equipment(
    item_id: int,
    payload: ReleaseInput,
    request: Request,
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    """Take equipment out of storage for reinstallation or disposal."""
    await check_rate_limit(request)

    item = await _get_equipment_or_404(db, item_id)
    try:
        release_equipment(item, payload, today)
    except ReleaseStateError as e:
        raise HTTPException(status_code=409, detail=str(e))

    db.add(item)
    await db.commit()
    logger.info(f"Stored equipment {item_id} released ({payload.release_type})")

    return build_stored_equipment_response(await _load_equipment(db, item_id))


@router.post("/{item_id}/release/revert", response_model=StoredEquipmentOut)
async def revert_stored_equipment_release(
    item_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    item = await _get_equipment_or_404(db, item_id)
    try:
        revert_release(item)
    except ReleaseStateError as e:
        raise HTTPException(status_code=409, detail=str(e))

    db.add(item)
    await db.commit()

    return build_stored_equipment_response(await _load_equipment(db, item_id))


@router.delete("/{item_id}")
async def delete_stored_equipment(
    item_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    item = await _get_equipment_or_404(db, item_id)

    await db.delete(item)
    await db.commit()

    return {"deleted": True}
