from datetime import date
from typing import Optional, Sequence

from hvacops.core.enums import StoredEquipmentStatus
from hvacops.schemas.warehouse import ReleaseInput


class ReleaseStateError(ValueError):
    pass


def warehouse_stock(warehouse) -> int:
    """Units still stored in ``warehouse``; released equipment no longer counts."""
    return sum(
        item.quantity for item in warehouse.equipment
        if item.status == StoredEquipmentStatus.STORED
    )


def stock_rate(capacity: Optional[int], stock: int) -> int:
    # whole percent, half rounds up; unknown capacity reads as 0
    if not capacity or not stock:
        return 0
    return int(stock * 100 / capacity + 0.5)


def release_equipment(item, release: ReleaseInput, today: date) -> None:
    if item.status == StoredEquipmentStatus.RELEASED:
        raise ReleaseStateError(f"Stored equipment {item.id} is already released")

    item.status = StoredEquipmentStatus.RELEASED
    item.release_type = release.release_type
    item.release_date = release.release_date or today
    item.release_destination = release.release_destination
    item.release_notes = release.release_notes


def revert_release(item) -> None:
    if item.status != StoredEquipmentStatus.RELEASED:
        raise ReleaseStateError(f"Stored equipment {item.id} is not released")

    item.status = StoredEquipmentStatus.STORED
    item.release_type = None
    item.release_date = None
    item.release_destination = None
    item.release_notes = None


def search_stored_equipment(items: Sequence, term: Optional[str]) -> list:
    if not term:
        return list(items)
    needle = term.strip().lower()
    return [
        item for item in items
        if any(
            needle in (value or "").lower()
            for value in (
                item.category,
                item.model,
                item.site_name,
                item.affiliate,
                item.address,
                item.manufacturer,
                item.notes,
            )
        )
    ]
