"""
Alpaca API — Document Shape Base
=================================

What:  The contract every record type served by RecordEndpointMaker must satisfy.
How:   A pydantic model that knows its identifier, whether it is valid, and how to
       prepare itself for insertion, plus the conversion to and from the stored
       MongoDB document.
Who:   Subclassed by concrete record types (see `project.py`); driven by
       RecordService for every CRUD operation.

Identifier mapping:
    Stored document    {"_id": ObjectId("65a1..."), "name": ...}
    API representation {"id": "65a1...",            "name": ...}
"""

from typing import Any, ClassVar, Dict, Optional, Tuple

from bson import ObjectId
from pydantic import BaseModel, Field

from alpaca.exceptions import ValidationError


def parse_object_id(value: Any) -> ObjectId:
    """
    Convert a record id from the URL into an ObjectId.

    Raises:
        ValidationError: value is not a 24-character hex string (→ 400)
    """
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise ValidationError(
            message=f"'{value}' is not a valid record ID",
            field="id",
        )
    return ObjectId(value)


class MongoDoc(BaseModel):
    """
    Base class for document shapes.

    Subclasses declare their fields and list the ones that must be non-empty
    strings in `required_fields`. Unknown fields in a request body are ignored.
    """

    required_fields: ClassVar[Tuple[str, ...]] = ()

    id: Optional[str] = Field(
        default=None,
        description="Record identifier (24-hex ObjectId); assigned on creation",
    )

    def doc_id(self) -> Optional[str]:
        return self.id

    def is_valid(self) -> bool:
        """True when every required field holds a non-empty string."""
        for name in self.required_fields:
            value = getattr(self, name, None)
            if not isinstance(value, str) or value == "":
                return False
        return True

    def build_for_insertion(self) -> None:
        """Assign a fresh ObjectId; any id supplied by the client is discarded."""
        self.id = str(ObjectId())

    def to_document(self) -> Dict[str, Any]:
        """Store representation: every field, with the id under `_id` as an ObjectId."""
        doc = self.model_dump(exclude={"id"})
        if self.id is not None:
            doc["_id"] = ObjectId(self.id)
        return doc

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "MongoDoc":
        data = dict(doc)
        oid = data.pop("_id", None)
        if oid is not None:
            data["id"] = str(oid)
        return cls.model_validate(data)
