from typing import Any, Optional, Tuple, Type, Union

from pydantic import TypeAdapter, ValidationError

_adapters = {int: TypeAdapter(int), float: TypeAdapter(float)}


def parse_number_field(value: Any, kind: Type[Union[int, float]] = int) -> Tuple[Optional[Union[int, float]], bool]:
    """Parse a loosely typed count or amount.

    Returns ``(parsed, invalid)`` like ``parse_date_field``. Spreadsheet
    spellings with thousands separators (``"1,500,000"``) are readable;
    anything carrying other text (``"2개"``) is not.
    """
    if value is None or isinstance(value, bool):
        return None, isinstance(value, bool)
    if isinstance(value, str):
        value = value.strip().replace(",", "")
        if not value:
            return None, False

    try:
        return _adapters[kind].validate_python(value), False
    except ValidationError:
        return None, True
