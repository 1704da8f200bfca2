import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from hvacops.core.dependencies import check_not_found, get_today
from hvacops.core.enums import ASStatus
from hvacops.core.rate_limit import check_rate_limit
from hvacops.core.response_builders import build_as_response, build_as_response_list
from hvacops.db.session import get_db
from hvacops.models.after_service import ASRequest
from hvacops.schemas.after_service import (
    ASBatchSettlement,
    ASRequestCreate,
    ASRequestOut,
    ASRequestUpdate,
    ASSettlementSummary,
    ASStatusUpdate,
)
from hvacops.services.after_service import (
    InvalidTransitionError,
    change_as_status,
    compute_total_amount,
    search_as_requests,
    summarize_settlement,
)
from hvacops.utils.dates import current_month

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/as", tags=["after-service"])


async def _get_request_or_404(db: AsyncSession, request_id: int) -> ASRequest:
    res = await db.execute(select(ASRequest).where(ASRequest.id == request_id))
    req = res.scalars().first()
    check_not_found(req, "AS request", request_id)
    return req


def _check_open(req: ASRequest) -> None:
    if req.status == ASStatus.SETTLED:
        raise HTTPException(status_code=409, detail=f"AS request {req.id} is settled and closed")


@router.get("/", response_model=List[ASRequestOut])
async def list_as_requests(
    status: Optional[ASStatus] = Query(None),
    affiliate: Optional[str] = Query(None),
    settlement_month: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Matches site, address, contact, model and technician"),
    db: AsyncSession = Depends(get_db),
):
    query = select(ASRequest)
    if status:
        query = query.where(ASRequest.status == status)
    if affiliate:
        query = query.where(ASRequest.affiliate == affiliate)
    if settlement_month:
        query = query.where(ASRequest.settlement_month == settlement_month)

    res = await db.execute(query.order_by(ASRequest.reception_date.desc(), ASRequest.id.desc()))
    return build_as_response_list(search_as_requests(res.scalars().all(), q))


@router.get("/summary", response_model=ASSettlementSummary)
async def settlement_summary(
    status: ASStatus = Query(ASStatus.COMPLETED),
    settlement_month: Optional[str] = Query(None),
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    """Monthly totals for requests awaiting settlement or already settled."""
    if status not in (ASStatus.COMPLETED, ASStatus.SETTLED):
        raise HTTPException(status_code=422, detail="Summary is only kept for completed or settled requests")

    month = settlement_month or current_month(today)
    res = await db.execute(
        select(ASRequest).where(ASRequest.status == status, ASRequest.settlement_month == month)
    )
    return summarize_settlement(res.scalars().all())


@router.get("/{request_id}", response_model=ASRequestOut)
async def get_as_request(request_id: int, db: AsyncSession = Depends(get_db)):
    return build_as_response(await _get_request_or_404(db, request_id))


@router.post("/", response_model=ASRequestOut)
async def create_as_request(
    payload: ASRequestCreate,
    request: Request,
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    req = ASRequest(
        **payload.model_dump(exclude={"reception_date"}),
        reception_date=payload.reception_date or today,
        status=ASStatus.RECEIVED,
        total_amount=0.0,
    )
    db.add(req)
    await db.commit()
    await db.refresh(req)
    logger.info(f"AS request {req.id} received from {payload.affiliate}")

    return build_as_response(req)


@router.put("/{request_id}", response_model=ASRequestOut)
async def update_as_request(
    request_id: int,
    payload: ASRequestUpdate,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    req = await _get_request_or_404(db, request_id)
    _check_open(req)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(req, field, value)
    req.total_amount = compute_total_amount(req.as_cost, req.reception_fee)

    db.add(req)
    await db.commit()
    await db.refresh(req)

    return build_as_response(req)


@router.post("/{request_id}/status", response_model=ASRequestOut)
async def update_as_status(
    request_id: int,
    payload: ASStatusUpdate,
    request: Request,
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    req = await _get_request_or_404(db, request_id)
    previous = req.status
    try:
        changed = change_as_status(req, payload.status, payload.settlement_month, today)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))

    if changed:
        db.add(req)
        await db.commit()
        await db.refresh(req)
        logger.info(f"AS request {request_id} moved from {previous} to {req.status}")

    return build_as_response(req)


@router.post("/settlement/batch", response_model=List[ASRequestOut])
async def batch_settle(
    payload: ASBatchSettlement,
    request: Request,
    today: date = Depends(get_today),
    db: AsyncSession = Depends(get_db),
):
    """Close a month: every listed request must be awaiting settlement."""
    await check_rate_limit(request)

    res = await db.execute(select(ASRequest).where(ASRequest.id.in_(payload.request_ids)))
    requests = {req.id: req for req in res.scalars().all()}

    missing = sorted(set(payload.request_ids) - set(requests))
    if missing:
        raise HTTPException(status_code=404, detail=f"AS requests not found: {missing}")
    pending = sorted(rid for rid, req in requests.items() if req.status != ASStatus.COMPLETED)
    if pending:
        raise HTTPException(status_code=409, detail=f"AS requests not awaiting settlement: {pending}")

    month = payload.settlement_month or current_month(today)
    for request_id in payload.request_ids:
        change_as_status(requests[request_id], ASStatus.SETTLED, month, today)

    await db.commit()
    logger.info(f"Settled {len(requests)} AS requests for {month}")

    settled = []
    for request_id in payload.request_ids:
        await db.refresh(requests[request_id])
        settled.append(requests[request_id])
    return build_as_response_list(settled)


@router.delete("/{request_id}")
async def delete_as_request(
    request_id: int,
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    await check_rate_limit(request)

    req = await _get_request_or_404(db, request_id)

    await db.delete(req)
    await db.commit()

    return {"deleted": True}
