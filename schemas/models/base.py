"""
Shared pieces for MongoDB document models.

PyObjectId accepts a bson ObjectId or its 24-character hex form and renders
back to a string in JSON output. Document models subclass MongoBaseModel and
convert to and from the raw dicts pymongo reads and writes.
"""

from __future__ import annotations

from typing import Annotated, Any, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, PlainValidator


def parse_object_id(value: Any) -> Optional[ObjectId]:
    """Return *value* as an ObjectId, or ``None`` when it is not a valid id."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def _validate_object_id(value: Any) -> ObjectId:
    oid = parse_object_id(value)
    if oid is None:
        raise ValueError(f"Invalid ObjectId: {value!r}")
    return oid


PyObjectId = Annotated[
    ObjectId,
    PlainValidator(_validate_object_id),
    PlainSerializer(str, return_type=str, when_used="json"),
]


class MongoBaseModel(BaseModel):
    """Base for document models; the Mongo ``_id`` is exposed as ``id``."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    def to_mongo(self) -> dict:
        """Return a pymongo-ready dict. An unset id is left out so Mongo assigns one."""
        exclude = {"id"} if self.id is None else None
        return self.model_dump(by_alias=True, exclude=exclude)

    @classmethod
    def from_mongo(cls, data: Optional[dict]):
        """Build a model from a pymongo dict; ``None`` (no match) stays ``None``."""
        if data is None:
            return None
        return cls.model_validate(data)
