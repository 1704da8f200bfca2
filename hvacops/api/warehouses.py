import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from hvacops.core.dependencies import check_not_found
from hvacops.core.rate_limit import check_rate_limit
from hvacops.core.response_builders import build_warehouse_response, build_warehouse_response_list
from hvacops.db.session import get_db
from hvacops.models.warehouse import Warehouse
from hvacops.schemas.warehouse import WarehouseCreate, WarehouseOut, WarehouseUpdate

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/warehouses", tags=["warehouses"])


def _warehouse_query():
    return select(Warehouse).options(selectinload(Warehouse.equipment))


async def load_warehouse(db: AsyncSession, warehouse_id: int) -> Optional[Warehouse]:
    res = await db.execute(
        _warehouse_query().where(Warehouse.id == warehouse_id).execution_options(populate_existing=True)
    )
    return res.scalars().first()


@router.get("/", response_model=List[WarehouseOut])
async def list_warehouses(
    q: Optional[str] = Query(None, description="Matches name or address"),
    db: AsyncSession = Depends(get_db),
):
    res = await db.execute(_warehouse_query().order_by(Warehouse.name, Warehouse.id))
    warehouses = res.scalars().all()
    if q:
        needle = q.strip().lower()
        warehouses = [
            w for w in warehouses
            if needle in w.name.lower() or needle in w.address.lower()
        ]
    return build_warehouse_response_list(warehouses)


@router.get("/{warehouse_id}", response_model=WarehouseOut)
async def get_warehouse(warehouse_id: int, db: AsyncSession = Depends(get_db)):
    warehouse = await load_warehouse(db, warehouse_id)
    check_not_found(warehouse, "Warehouse", warehouse_id)
    return build_warehouse_response(warehouse)


@router.post("/", response_model=WarehouseOut)
async def create_warehouse(
    payload: WarehouseCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    warehouse = Warehouse(**payload.model_dump())
    db.add(warehouse)
    await db.commit()
    logger.info(f"Warehouse {payload.name} added")

    return build_warehouse_response(await load_warehouse(db, warehouse.id))


@router.put("/{warehouse_id}", response_model=WarehouseOut)
async def update_warehouse(
    warehouse_id: int,
    payload: WarehouseUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    warehouse = await load_warehouse(db, warehouse_id)
    check_not_found(warehouse, "Warehouse", warehouse_id)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(warehouse, field, value)

    db.add(warehouse)
    await db.commit()

    return build_warehouse_response(await load_warehouse(db, warehouse_id))


@router.delete("/{warehouse_id}")
async def delete_warehouse(
    warehouse_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    warehouse = await load_warehouse(db, warehouse_id)
    check_not_found(warehouse, "Warehouse", warehouse_id)
    if warehouse.equipment:
        raise HTTPException(
            status_code=409,
            detail=f"Warehouse {warehouse_id} still holds {len(warehouse.equipment)} equipment records",
        )

    await db.delete(warehouse)
    await db.commit()

    return {"deleted": True}
