"""snake_case / camelCase key conversion for records exchanged with clients and importers"""
import re
from datetime import date, datetime
from typing import Any

_SNAKE_RE = re.compile(r"_([a-z])")
_CAMEL_RE = re.compile(r"[A-Z]")


def snake_to_camel(name: str) -> str:
    return _SNAKE_RE.sub(lambda m: m.group(1).upper(), name)


def camel_to_snake(name: str) -> str:
    return _CAMEL_RE.sub(lambda m: f"_{m.group(0).lower()}", name)


def to_camel_case(obj: Any) -> Any:
    """Recursively rename dict keys to camelCase; lists and nested dicts included."""
    if obj is None:
        return obj
    if isinstance(obj, list):
        return [to_camel_case(item) for item in obj]
    if isinstance(obj, (date, datetime)):
        return obj
    if not isinstance(obj, dict):
        return obj
    return {snake_to_camel(key): to_camel_case(value) for key, value in obj.items()}


def to_snake_case(obj: Any) -> Any:
    """Rename top-level dict keys to snake_case.

    Nested values are left as they are; related rows are converted on their own.
    """
    if obj is None:
        return obj
    if isinstance(obj, list):
        return [to_snake_case(item) for item in obj]
    if isinstance(obj, (date, datetime)):
        return obj
    if not isinstance(obj, dict):
        return obj
    return {camel_to_snake(key): value for key, value in obj.items()}
