from datetime import datetime
from decimal import Decimal
from enum import Enum

from bson import Decimal128, ObjectId


def to_float(value):
    """Decimal128 / Decimal -> float; anything else passes through."""
    if isinstance(value, Decimal128):
        return float(value.to_decimal())
    if isinstance(value, Decimal):
        return float(value)
    return value


def serialize_mongo(obj):
    """
    Recursively turn stored documents (and audit meta) into JSON-safe values.
    """
    if isinstance(obj, ObjectId):
        return str(obj)

    if isinstance(obj, datetime):
        return obj.isoformat()

    if isinstance(obj, Enum):
        return obj.value

    if isinstance(obj, (Decimal128, Decimal)):
        return to_float(obj)

    if isinstance(obj, (list, tuple)):
        return [serialize_mongo(i) for i in obj]

    if isinstance(obj, dict):
        return {k: serialize_mongo(v) for k, v in obj.items()}

    return obj
