"""Data access layer.

Repositories are the only modules that issue MongoDB queries. Relationship
lists embedded in documents are changed through dedicated methods using
atomic update operators.
"""

from typing import Any

from bson import ObjectId
from bson.errors import InvalidId


def to_object_id(value: Any) -> ObjectId | None:
    """Parse ``value`` into an ObjectId, returning None when it is not one."""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str):
        return None
    try:
        return ObjectId(value)
    except InvalidId:
        return None


def serialize(document: dict[str, Any] | None) -> dict[str, Any] | None:
    """Convert ObjectIds (also inside lists) to hex strings for JSON output."""
    if document is None:
        return None
    result: dict[str, Any] = {}
    for key, value in document.items():
        if isinstance(value, ObjectId):
            result[key] = str(value)
        elif isinstance(value, list):
            result[key] = [str(item) if isinstance(item, ObjectId) else item for item in value]
        else:
            result[key] = value
    return result
