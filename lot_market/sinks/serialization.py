"""JSON-ready views of lots and lot events."""

from dataclasses import fields, is_dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from lot_market.models import LotEvent


def to_dict(record: Any) -> dict:
    """Convert a lot, a lot event or a plain dict for output.

    Events also carry their ``subject`` so consumers can key on it without
    knowing the ``lot-<id>`` convention.
    """
    if isinstance(record, LotEvent):
        return {**dataclass_to_dict(record), "subject": record.subject}
    if is_dataclass(record):
        return dataclass_to_dict(record)
    if isinstance(record, dict):
        return {k: serialize_value(v) for k, v in record.items()}
    return {"value": str(record)}


def dataclass_to_dict(obj: Any) -> dict:
    # fields() + getattr avoids the deep copy asdict() makes
    return {f.name: serialize_value(getattr(obj, f.name)) for f in fields(obj)}


def serialize_value(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return dataclass_to_dict(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [serialize_value(v) for v in value]
    return value
