"""
JSON serialisation helpers for values coming back from aiomysql.
"""

import json
from datetime import datetime, date, time, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID


def serialize_value(obj: Any) -> Any:
    """JSON serialisation helper for non-native types."""
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    if isinstance(obj, timedelta):
        # MySQL TIME columns arrive as timedelta
        return str(obj)
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, UUID):
        return str(obj)
    if isinstance(obj, (bytes, bytearray)):
        try:
            return bytes(obj).decode("utf-8")
        except UnicodeDecodeError:
            return bytes(obj).hex()
    if isinstance(obj, set):
        # SET columns
        return sorted(obj)
    return str(obj)


def serialize_row(row: dict[str, Any]) -> dict[str, Any]:
    """Coerce every value of a DictCursor row."""
    return {key: serialize_value(value) for key, value in row.items()}


def to_json(payload: Any) -> str:
    return json.dumps(payload, indent=2, default=serialize_value)
