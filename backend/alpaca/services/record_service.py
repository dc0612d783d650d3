"""
Alpaca API — Record Service (one collection, one document shape)
=================================================================

What:  The driver calls behind every record endpoint.
Why:   Handlers stay thin, and the operations can be tested without HTTP.
How:   A RecordService binds a collection name to a document shape. Each
       operation receives the database handle, performs a single driver call
       (update reads, then replaces) and translates the outcome:
           document / count          → shape instance(s)
           None / zero count          → NotFoundError  (404)
           bad id / body / document   → ValidationError (400)
           PyMongoError               → DatabaseError  (500)
Who:   Called by the handlers RecordEndpointMaker registers.

Operation → driver call:
    get      find_one({"_id": oid})
    list     find({})
    create   insert_one(doc)
    update   find_one + replace_one({"_id": oid}, doc)
    remove   delete_one({"_id": oid})
    search   find({field: {"$regex": "^" + prefix}, ...})
"""

import logging
from typing import Any, Dict, List, Type

from bson import ObjectId
from pydantic import ValidationError as PydanticValidationError
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import OperationFailure, PyMongoError

from alpaca.exceptions import DatabaseError, NotFoundError, ValidationError
from alpaca.models.document import MongoDoc, parse_object_id

logger = logging.getLogger(__name__)

# Body keys that never overwrite the stored identifier on update
_ID_KEYS = ("id", "_id")

# Server error codes for a regex it cannot compile (BadValue, and the
# dedicated code newer servers report)
_BAD_REGEX_CODES = (2, 51091)


class RecordService:
    """
    CRUD + prefix search for one collection.

    Stateless apart from its binding: the same instance serves every request
    for its collection, the database handle arrives with each call.
    """

    def __init__(self, record: str, shape: Type[MongoDoc]):
        self.record = record
        self.shape = shape

    def __repr__(self) -> str:
        return f"<RecordService(record='{self.record}', shape={self.shape.__name__})>"

    # ── Read ──────────────────────────────────────────────────────────────

    async def get(self, db: AsyncDatabase, record_id: str) -> MongoDoc:
        """
        Fetch one record by id.

        Raises:
            ValidationError: record_id is not an ObjectId (→ 400)
            NotFoundError: no document with that id (→ 404)
            DatabaseError: driver failure (→ 500)
        """
        oid = parse_object_id(record_id)
        return await self._find_one(db, oid, record_id)

    async def list(self, db: AsyncDatabase) -> List[MongoDoc]:
        """Every record in the collection, in natural order."""
        try:
            docs = await db[self.record].find({}).to_list(length=None)
        except PyMongoError as e:
            raise self._database_error("list", e)
        return [self._load(doc) for doc in docs]

    async def search(self, db: AsyncDatabase, criteria: Any) -> List[MongoDoc]:
        """
        Records whose fields start with the given prefixes.

        `criteria` is the decoded request body, e.g. {"name": "Alp", "category": "web"}.
        Each value is a regular expression anchored at the start of the field;
        all pairs must match. An empty object matches every record.

        Patterns are compiled by the server (PCRE), so `\\p{L}` and other PCRE
        syntax is accepted. A pattern the server rejects answers 400.
        """
        query = self.build_search_query(criteria)
        try:
            docs = await db[self.record].find(query).to_list(length=None)
        except OperationFailure as e:
            if e.code in _BAD_REGEX_CODES:
                logger.warning("Search on %s rejected by server: %s", self.record, str(e))
                raise ValidationError(
                    message="Search value is not a valid pattern",
                    context={"record": self.record, "fields": sorted(query)},
                )
            raise self._database_error("search", e)
        except PyMongoError as e:
            raise self._database_error("search", e)
        logger.debug("Search on %s matched %d records", self.record, len(docs))
        return [self._load(doc) for doc in docs]

    @staticmethod
    def build_search_query(criteria: Any) -> Dict[str, Any]:
        if not isinstance(criteria, dict):
            raise ValidationError(
                message="Search body must be a JSON object of field/prefix pairs",
            )

        query: Dict[str, Any] = {}
        for field, prefix in criteria.items():
            # "$where", "$expr" and friends would become query operators
            if not field or field.startswith("$"):
                raise ValidationError(
                    message=f"'{field}' is not a searchable field name",
                    field=field,
                )
            if not isinstance(prefix, str):
                raise ValidationError(
                    message=f"Search value for '{field}' must be a string",
                    field=field,
                )
            query[field] = {"$regex": "^" + prefix}
        return query

    # ── Write ─────────────────────────────────────────────────────────────

    async def create(self, db: AsyncDatabase, payload: Any) -> MongoDoc:
        """
        Insert a new record.

        Workflow: decode → is_valid() → build_for_insertion() → insert_one.
        The returned document carries the generated id.
        """
        target = self._decode(payload)
        self._require_valid(target)
        target.build_for_insertion()

        try:
            await db[self.record].insert_one(target.to_document())
        except PyMongoError as e:
            raise self._database_error("create", e)

        logger.info("Created %s %s", self.record, target.doc_id())
        return target

    async def update(self, db: AsyncDatabase, record_id: str, payload: Any) -> MongoDoc:
        """
        Overlay the payload on the stored record and replace it.

        Fields absent from the payload keep their stored values; the id always
        comes from the URL.
        """
        oid = parse_object_id(record_id)
        if not isinstance(payload, dict):
            raise ValidationError(message="Request body must be a JSON object")

        existing = await self._find_one(db, oid, record_id)

        merged = existing.model_dump()
        merged.update({k: v for k, v in payload.items() if k not in _ID_KEYS})
        target = self._decode(merged)
        target.id = existing.doc_id()
        self._require_valid(target)

        try:
            result = await db[self.record].replace_one({"_id": oid}, target.to_document())
        except PyMongoError as e:
            raise self._database_error("update", e, record_id)

        # Removed between the read and the replace
        if result.matched_count == 0:
            raise NotFoundError(resource=self.record, resource_id=record_id)

        logger.info("Updated %s %s", self.record, record_id)
        return target

    async def remove(self, db: AsyncDatabase, record_id: str) -> None:
        oid = parse_object_id(record_id)
        try:
            result = await db[self.record].delete_one({"_id": oid})
        except PyMongoError as e:
            raise self._database_error("remove", e, record_id)

        if result.deleted_count == 0:
            raise NotFoundError(resource=self.record, resource_id=record_id)

        logger.info("Removed %s %s", self.record, record_id)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _find_one(self, db: AsyncDatabase, oid: ObjectId, record_id: str) -> MongoDoc:
        try:
            doc = await db[self.record].find_one({"_id": oid})
        except PyMongoError as e:
            raise self._database_error("get", e, record_id)

        if doc is None:
            raise NotFoundError(resource=self.record, resource_id=record_id)
        return self._load(doc)

    def _decode(self, payload: Any) -> MongoDoc:
        """Request body → shape instance; type mismatches answer 400."""
        if not isinstance(payload, dict):
            raise ValidationError(message="Request body must be a JSON object")
        try:
            return self.shape.model_validate(payload)
        except PydanticValidationError as e:
            fields = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
            raise ValidationError(
                message=f"Invalid {self.record} document",
                context={"record": self.record, "invalid_fields": fields},
            )

    def _load(self, doc: Dict[str, Any]) -> MongoDoc:
        """Stored document → shape instance; a stored shape mismatch is a server error."""
        try:
            return self.shape.from_document(doc)
        except PydanticValidationError as e:
            logger.error(
                "Stored %s document %s does not match %s: %s",
                self.record, doc.get("_id"), self.shape.__name__, str(e),
            )
            raise DatabaseError(
                message=f"A stored {self.record} record could not be read.",
                context={"record": self.record, "document_id": str(doc.get("_id"))},
            )

    def _require_valid(self, target: MongoDoc) -> None:
        if not target.is_valid():
            raise ValidationError(
                message="Required fields missing",
                context={"record": self.record, "required": list(self.shape.required_fields)},
            )

    def _database_error(
        self, operation: str, error: PyMongoError, record_id: str | None = None
    ) -> DatabaseError:
        logger.error(
            "Database error during %s on %s%s: %s",
            operation,
            self.record,
            f" ({record_id})" if record_id else "",
            str(error),
        )
        context: Dict[str, Any] = {
            "record": self.record,
            "operation": operation,
            "original_error": type(error).__name__,
        }
        if record_id:
            context["record_id"] = record_id
        return DatabaseError(context=context)
