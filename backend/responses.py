from datetime import datetime, timezone
from typing import Any

from bson import ObjectId
from pydantic.alias_generators import to_camel


def serialize(value: Any) -> Any:
    """Turn a stored document into its wire shape.

    ``_id`` becomes ``id``, ObjectIds become hex strings and snake_case keys
    become camelCase. Password hashes never leave the server. Timestamps are
    stored in UTC and always go out with their offset.
    """
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, list):
        return [serialize(item) for item in value]
    if isinstance(value, dict):
        out = {}
        for key, item in value.items():
            if key == "password_hash":
                continue
            out["id" if key == "_id" else to_camel(key)] = serialize(item)
        return out
    return value


def ok(data: Any = None, message: str | None = None, count: int | None = None) -> dict:
    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if count is not None:
        body["count"] = count
    return body
