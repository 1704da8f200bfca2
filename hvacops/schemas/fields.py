"""Typed view of an order record used by the status rules.

Rule functions only ever see ``date | None`` for date fields. Loose input
(imports, raw client records) goes through ``OrderFields.from_raw``, which is
the one place where an unreadable date is told apart from a missing one.
"""
import logging
from datetime import date
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hvacops.core.enums import DeliveryStatus, OrderLifecycle, SettlementStatus
from hvacops.utils.case import to_snake_case
from hvacops.utils.dates import parse_date_field
from hvacops.utils.numbers import parse_number_field

logger = logging.getLogger(__name__)

ORDER_DATE_FIELDS = (
    "order_date",
    "requested_install_date",
    "install_schedule_date",
    "install_complete_date",
    "requested_delivery_date",
    "confirmed_delivery_date",
)

ITEM_DATE_FIELDS = (
    "order_date",
    "requested_delivery_date",
    "scheduled_delivery_date",
    "confirmed_delivery_date",
)

WORK_ITEM_NUMBER_FIELDS = (("quantity", int),)
EQUIPMENT_NUMBER_FIELDS = (("quantity", int), ("unit_price", float))


def _as_text(value: Any) -> Any:
    # spreadsheet exports hand over order numbers and models as numbers
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str) and not value.strip():
        return None
    return value


class WorkItemFields(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    work_type: Optional[str] = None
    category: Optional[str] = None
    model: Optional[str] = None
    size: Optional[str] = None
    quantity: int = 1

    @field_validator("work_type", "category", "model", "size", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return _as_text(value)


class EquipmentItemFields(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    set_model: Optional[str] = None
    component_name: Optional[str] = None
    component_model: Optional[str] = None
    order_number: Optional[str] = None
    quantity: int = 1
    unit_price: Optional[float] = None
    order_date: Optional[date] = None
    requested_delivery_date: Optional[date] = None
    scheduled_delivery_date: Optional[date] = None
    confirmed_delivery_date: Optional[date] = None

    @field_validator("set_model", "component_name", "component_model", "order_number", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return _as_text(value)


class OrderFields(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    status: OrderLifecycle = OrderLifecycle.ACTIVE
    s1_settlement_status: Optional[Union[SettlementStatus, str]] = None
    order_date: Optional[date] = None
    requested_install_date: Optional[date] = None
    install_schedule_date: Optional[date] = None
    install_complete_date: Optional[date] = None
    samsung_order_number: Optional[str] = None
    requested_delivery_date: Optional[date] = None
    confirmed_delivery_date: Optional[date] = None
    items: List[WorkItemFields] = Field(default_factory=list)
    equipment_items: List[EquipmentItemFields] = Field(default_factory=list)

    # Cached column. Only its presence is meaningful: it marks an order
    # that has opted into delivery tracking.
    delivery_status: Optional[DeliveryStatus] = None

    invalid_fields: List[str] = Field(default_factory=list)

    @field_validator("samsung_order_number", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> Any:
        return _as_text(value)

    @property
    def tracks_delivery(self) -> bool:
        return self.delivery_status is not None

    @classmethod
    def from_record(cls, record: Any) -> "OrderFields":
        """Build from a persisted ORM order (dates are already typed)."""
        return cls.model_validate(record)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "OrderFields":
        """Build from a loosely typed camelCase or snake_case record.

        Unreadable dates become ``None``, unreadable quantities and prices
        fall back to their defaults, and entries of ``items`` or
        ``equipmentItems`` that are not records are skipped. Each of these
        is listed in ``invalid_fields``.
        """
        data = to_snake_case(dict(raw))
        invalid: List[str] = []

        for name in ORDER_DATE_FIELDS:
            parsed, bad = parse_date_field(data.get(name))
            data[name] = parsed
            if bad:
                invalid.append(name)

        equipment = []
        for index, item in _records(data, "equipment_items", invalid):
            for name in ITEM_DATE_FIELDS:
                parsed, bad = parse_date_field(item.get(name))
                item[name] = parsed
                if bad:
                    invalid.append(f"equipment_items[{index}].{name}")
            _read_numbers(item, EQUIPMENT_NUMBER_FIELDS, f"equipment_items[{index}]", invalid)
            equipment.append(item)
        data["equipment_items"] = equipment

        items = []
        for index, item in _records(data, "items", invalid):
            _read_numbers(item, WORK_ITEM_NUMBER_FIELDS, f"items[{index}]", invalid)
            items.append({k: v for k, v in item.items() if v is not None})
        data["items"] = items

        status = data.get("status")
        data["status"] = (
            OrderLifecycle.CANCELLED
            if str(status or "").strip() == OrderLifecycle.CANCELLED.value
            else OrderLifecycle.ACTIVE
        )
        settlement = data.get("s1_settlement_status")
        data["s1_settlement_status"] = (
            SettlementStatus(settlement)
            if isinstance(settlement, str) and settlement in {s.value for s in SettlementStatus}
            else None
        )
        if data.get("delivery_status") not in {s.value for s in DeliveryStatus}:
            data["delivery_status"] = DeliveryStatus.PENDING if data.get("delivery_status") else None

        if invalid:
            logger.warning(f"Treating unreadable values as absent: {', '.join(invalid)}")

        # external ids are not ours; rows get fresh ids when stored
        known = set(cls.model_fields) - {"invalid_fields", "id"}
        fields = cls.model_validate({k: v for k, v in data.items() if k in known})
        fields.invalid_fields = invalid
        return fields


def _records(data: dict, name: str, invalid: List[str]):
    """Yield ``(index, snake_case dict)`` for each record-shaped entry of a list field."""
    entries = data.get(name) or []
    if not isinstance(entries, list):
        invalid.append(name)
        return
    for index, entry in enumerate(entries):
        if not isinstance(entry, Mapping):
            invalid.append(f"{name}[{index}]")
            continue
        yield index, to_snake_case(dict(entry))


def _read_numbers(item: dict, numbers: tuple, prefix: str, invalid: List[str]) -> None:
    # a missing or unreadable value drops out so the model default applies
    for name, kind in numbers:
        if name not in item:
            continue
        parsed, bad = parse_number_field(item[name], kind)
        if bad:
            invalid.append(f"{prefix}.{name}")
        if parsed is None:
            item.pop(name)
        else:
            item[name] = parsed
