from typing import Annotated, Any

from bson import ObjectId
from pydantic import BeforeValidator


class PyObjectId(ObjectId):
    """ObjectId usable as a pydantic field; accepts ObjectId or its hex string."""

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any):
        from pydantic_core import core_schema

        return core_schema.no_info_plain_validator_function(
            cls.validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, when_used="json"
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, schema: Any, handler: Any) -> dict:
        return {"type": "string", "pattern": "^[0-9a-fA-F]{24}$"}

    @classmethod
    def validate(cls, value: Any) -> ObjectId:
        if isinstance(value, ObjectId):
            return value
        if isinstance(value, str) and ObjectId.is_valid(value):
            return ObjectId(value)
        raise ValueError("Invalid ObjectId")


# Response-side id: whatever the document holds, rendered as its string form
StrId = Annotated[str, BeforeValidator(str)]


def to_object_id(value: str | ObjectId | None) -> ObjectId | None:
    """Convert a hex string to ObjectId; None for missing or malformed values."""
    if value is None:
        return None
    if isinstance(value, ObjectId):
        return value
    if ObjectId.is_valid(value):
        return ObjectId(value)
    return None
