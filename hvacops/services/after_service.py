"""After-sales request rules.

A request moves one step at a time along received, in-progress, completed
(awaiting settlement) and settled, in either direction. Settled requests
are billed per month, with each affiliate's total cut to whole thousands.
"""
import math
from datetime import date
from typing import Optional, Sequence

from hvacops.core.enums import ASStatus
from hvacops.schemas.after_service import ASSettlementSummary
from hvacops.utils.dates import current_month

AS_STEPS = (ASStatus.RECEIVED, ASStatus.IN_PROGRESS, ASStatus.COMPLETED, ASStatus.SETTLED)
VAT_RATE = 0.1
BILLING_UNIT = 1000


class InvalidTransitionError(ValueError):
    def __init__(self, current: ASStatus, target: ASStatus):
        super().__init__(f"Cannot move an AS request from {current} to {target}")
        self.current = current
        self.target = target


def compute_total_amount(as_cost: Optional[float], reception_fee: Optional[float]) -> float:
    return (as_cost or 0.0) + (reception_fee or 0.0)


def change_as_status(request, status: ASStatus, settlement_month: Optional[str], today: date) -> bool:
    """Move ``request`` to ``status``; returns False when it is already there."""
    current = AS_STEPS.index(request.status)
    target = AS_STEPS.index(status)
    if current == target:
        return False
    if abs(target - current) != 1:
        raise InvalidTransitionError(request.status, status)

    forward = target > current
    request.status = status
    if settlement_month:
        request.settlement_month = settlement_month
    if forward and status in (ASStatus.IN_PROGRESS, ASStatus.SETTLED) and not request.settlement_month:
        request.settlement_month = current_month(today)
    if forward and status == ASStatus.COMPLETED and request.processed_date is None:
        request.processed_date = today
    return True


def search_as_requests(requests: Sequence, term: Optional[str]) -> list:
    if not term:
        return list(requests)
    needle = term.strip().lower()
    return [
        req for req in requests
        if any(
            needle in (value or "").lower()
            for value in (
                req.business_name,
                req.address,
                req.detail_address,
                req.affiliate,
                req.contact_name,
                req.model_name,
                req.as_reason,
                req.samsung_as_center,
                req.technician_name,
            )
        )
    ]


def summarize_settlement(requests: Sequence) -> ASSettlementSummary:
    by_affiliate = {}
    for req in requests:
        key = req.affiliate or "기타"
        by_affiliate[key] = by_affiliate.get(key, 0.0) + (req.total_amount or 0.0)

    total_amount = sum(by_affiliate.values())
    truncated = sum(math.floor(amount / BILLING_UNIT) * BILLING_UNIT for amount in by_affiliate.values())

    return ASSettlementSummary(
        count=len(requests),
        total_as_cost=sum(req.as_cost or 0.0 for req in requests),
        total_reception_fee=sum(req.reception_fee or 0.0 for req in requests),
        total_amount=total_amount,
        by_affiliate=by_affiliate,
        truncated_total=truncated,
        truncation_diff=total_amount - truncated,
        total_with_vat=math.floor(truncated * (1 + VAT_RATE) + 0.5),
    )
