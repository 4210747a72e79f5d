from typing import Any

from bson import ObjectId


def is_object_id(value: Any) -> bool:
    return isinstance(value, str) and ObjectId.is_valid(value)
