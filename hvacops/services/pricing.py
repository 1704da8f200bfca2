import math
from typing import Optional, Sequence

from hvacops.core.config import settings
from hvacops.schemas.quote import QuoteLine, QuoteRequest, QuoteResponse


class UnknownModelError(LookupError):
    def __init__(self, model: str):
        super().__init__(model)
        self.model = model


def find_price_row(rows: Sequence, model: str):
    """Exact SET model match, or None."""
    for row in rows:
        if row.model == model:
            return row
    return None


def search_price_table(rows: Sequence, term: Optional[str]) -> list:
    if not term:
        return list(rows)
    needle = term.strip()
    lowered = needle.lower()
    return [
        row for row in rows
        if needle in (row.category or "")
        or lowered in (row.model or "").lower()
        or needle in (row.size or "")
    ]


async def calculate_quote(req: QuoteRequest, rows: Sequence) -> QuoteResponse:
    lines = []

    for line in req.equipment:
        row = find_price_row(rows, line.model)
        if row is None:
            raise UnknownModelError(line.model)
        lines.append(QuoteLine(
            item_name=f"{row.category} {row.size or ''}".strip(),
            category="equipment",
            model=row.model,
            quantity=line.quantity,
            unit_price=row.price,
            total_price=row.price * line.quantity,
        ))

    for line in req.installation:
        lines.append(QuoteLine(
            item_name=line.item_name,
            category="installation",
            quantity=line.quantity,
            unit_price=line.unit_price,
            total_price=line.unit_price * line.quantity,
        ))

    supply_amount = sum(line.total_price for line in lines)
    vat_amount = float(math.floor(supply_amount * settings.VAT_RATE))
    return QuoteResponse(
        items=lines,
        supply_amount=supply_amount,
        vat_amount=vat_amount,
        total_amount=supply_amount + vat_amount,
    )
