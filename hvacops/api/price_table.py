import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from hvacops.core.dependencies import check_not_found
from hvacops.core.rate_limit import check_rate_limit
from hvacops.core.response_builders import build_price_row_response, build_price_row_response_list
from hvacops.db.session import get_db
from hvacops.models.price_table import PriceTableComponent, PriceTableRow
from hvacops.schemas.price_table import PriceTableRowCreate, PriceTableRowOut, PriceTableRowUpdate
from hvacops.services.pricing import search_price_table

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/price-table", tags=["price-table"])


def _row_query():
    return select(PriceTableRow).options(selectinload(PriceTableRow.components))


async def load_price_rows(db: AsyncSession) -> list:
    res = await db.execute(_row_query().order_by(PriceTableRow.category, PriceTableRow.model))
    return res.scalars().all()


async def _load_row(db: AsyncSession, row_id: int) -> Optional[PriceTableRow]:
    res = await db.execute(
        _row_query().where(PriceTableRow.id == row_id).execution_options(populate_existing=True)
    )
    return res.scalars().first()


async def _check_model_free(db: AsyncSession, model: str, row_id: Optional[int] = None) -> None:
    res = await db.execute(select(PriceTableRow.id).where(PriceTableRow.model == model))
    existing = res.scalars().first()
    if existing is not None and existing != row_id:
        raise HTTPException(status_code=409, detail=f"SET model {model} already exists")


@router.get("/", response_model=List[PriceTableRowOut])
async def list_price_table(
    q: Optional[str] = Query(None, description="Matches category, size or model"),
    db: AsyncSession = Depends(get_db),
):
    rows = await load_price_rows(db)
    return build_price_row_response_list(search_price_table(rows, q))


@router.get("/{row_id}", response_model=PriceTableRowOut)
async def get_price_row(row_id: int, db: AsyncSession = Depends(get_db)):
    row = await _load_row(db, row_id)
    check_not_found(row, "Price table row", row_id)
    return build_price_row_response(row)


@router.get("/models/{model}", response_model=PriceTableRowOut)
async def get_price_by_model(model: str, db: AsyncSession = Depends(get_db)):
    res = await db.execute(_row_query().where(PriceTableRow.model == model))
    row = res.scalars().first()
    if row is None:
        raise HTTPException(status_code=404, detail=f"SET model {model} not found")
    return build_price_row_response(row)


@router.post("/", response_model=PriceTableRowOut)
async def create_price_row(
    payload: PriceTableRowCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)
    await _check_model_free(db, payload.model)

    row = PriceTableRow(
        category=payload.category,
        model=payload.model,
        size=payload.size,
        price=payload.price,
        components=[PriceTableComponent(**c.model_dump()) for c in payload.components],
    )
    db.add(row)
    await db.commit()
    logger.info(f"Price table row {payload.model} added")

    return build_price_row_response(await _load_row(db, row.id))


@router.put("/{row_id}", response_model=PriceTableRowOut)
async def update_price_row(
    row_id: int,
    payload: PriceTableRowUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    row = await _load_row(db, row_id)
    check_not_found(row, "Price table row", row_id)
    if payload.model and payload.model != row.model:
        await _check_model_free(db, payload.model, row_id)

    for field, value in payload.model_dump(exclude_unset=True, exclude={"components"}).items():
        setattr(row, field, value)
    # components are replaced as a whole
    if payload.components is not None:
        row.components = [PriceTableComponent(**c.model_dump()) for c in payload.components]

    db.add(row)
    await db.commit()

    return build_price_row_response(await _load_row(db, row_id))


@router.delete("/{row_id}")
async def delete_price_row(
    row_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    row = await _load_row(db, row_id)
    check_not_found(row, "Price table row", row_id)

    await db.delete(row)
    await db.commit()

    return {"deleted": True}
