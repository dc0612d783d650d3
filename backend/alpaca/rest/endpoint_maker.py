"""
Alpaca API — RecordEndpointMaker
=================================

What:  Registers the REST endpoints of a MongoDB collection on an APIRouter.
How:   Given a collection name and a document shape, each make_*_endpoint()
       builds a handler closure bound to a RecordService and adds it to the
       router. Handlers stay thin: read the request, call the service, return
       the document. Errors propagate to the global exception handlers.

Endpoints for record "projects" under prefix "api":
    GET     /api/projects                 list
    POST    /api/projects                 create
    POST    /api/projects/_search         prefix search
    GET     /api/projects/{record_id}     get
    PUT     /api/projects/{record_id}     update
    DELETE  /api/projects/{record_id}     remove

Status codes:
    200  success (DELETE has an empty body)
    400  malformed id, body that is not JSON, invalid document
    404  no record with that id
    500  driver failure
"""

import logging
from typing import Any, Callable, Dict, List, Type

from fastapi import APIRouter, Depends, Request, Response
from pymongo.asynchronous.database import AsyncDatabase

from alpaca.database import get_database
from alpaca.exceptions import ValidationError
from alpaca.models.document import MongoDoc
from alpaca.schemas.responses import ErrorResponse
from alpaca.services.record_service import RecordService

logger = logging.getLogger(__name__)

SEARCH_SEGMENT = "_search"

_BAD_REQUEST = {400: {"description": "Invalid request", "model": ErrorResponse}}
_NOT_FOUND = {404: {"description": "Record not found", "model": ErrorResponse}}
_SERVER_ERROR = {500: {"description": "Database error", "model": ErrorResponse}}


def make_path(prefix: str, endpoint: str, *more: str) -> str:
    """make_path("api", "projects", "{record_id}") → "/api/projects/{record_id}" """
    parts = [prefix, endpoint, *more]
    return "/" + "/".join(part.strip("/") for part in parts if part)


async def read_json(request: Request) -> Any:
    """Decoded request body; an empty or malformed body answers 400."""
    try:
        return await request.json()
    except ValueError:
        raise ValidationError(message="Request body is not valid JSON")


def _log_request(request: Request) -> None:
    uri = request.url.path
    if request.url.query:
        uri = f"{uri}?{request.url.query}"
    logger.info("%s %s", request.method, uri)


def _json_body(schema: Dict[str, Any]) -> Dict[str, Any]:
    """OpenAPI request body for handlers that read the raw request."""
    return {
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": schema}},
        }
    }


class RecordEndpointMaker:
    """
    Factory for collection endpoints.

    Attributes:
        prefix: First path segment shared by every endpoint (e.g. "api")
        router: Router the endpoints are added to
        get_db: FastAPI dependency returning the database handle

    Example:
        router = APIRouter()
        maker = RecordEndpointMaker(prefix="api", router=router)
        maker.make_record_endpoints("projects", Project)
        app.include_router(router)
    """

    def __init__(
        self,
        prefix: str,
        router: APIRouter,
        get_db: Callable[..., AsyncDatabase] = get_database,
    ):
        self.prefix = prefix.strip("/")
        self.router = router
        self.get_db = get_db
        self._services: Dict[str, RecordService] = {}

    def service_for(self, record: str, shape: Type[MongoDoc]) -> RecordService:
        """One RecordService per collection, shared by its handlers."""
        service = self._services.get(record)
        if service is None or service.shape is not shape:
            service = RecordService(record, shape)
            self._services[record] = service
        return service

    def make_record_endpoints(self, record: str, shape: Type[MongoDoc]) -> None:
        """Register list, search, create, get, update and remove for `record`."""
        self.make_list_endpoint(record, shape)
        self.make_search_endpoint(record, shape)
        self.make_create_endpoint(record, shape)
        self.make_get_endpoint(record, shape)
        self.make_update_endpoint(record, shape)
        self.make_remove_endpoint(record, shape)

    # ── GET /{prefix}/{record}/{record_id} ────────────────────────────────
    def make_get_endpoint(self, record: str, shape: Type[MongoDoc]) -> None:
        service = self.service_for(record, shape)

        async def get_record(
            record_id: str,
            request: Request,
            db: AsyncDatabase = Depends(self.get_db),
        ) -> Any:
            _log_request(request)
            return await service.get(db, record_id)

        self.router.add_api_route(
            make_path(self.prefix, record, "{record_id}"),
            get_record,
            methods=["GET"],
            name=f"{record}_get",
            response_model=shape,
            responses={**_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR},
            summary=f"Get a {record} record by ID",
        )

    # ── GET /{prefix}/{record} ────────────────────────────────────────────
    def make_list_endpoint(self, record: str, shape: Type[MongoDoc]) -> None:
        service = self.service_for(record, shape)

        async def list_records(
            request: Request,
            db: AsyncDatabase = Depends(self.get_db),
        ) -> Any:
            _log_request(request)
            return await service.list(db)

        self.router.add_api_route(
            make_path(self.prefix, record),
            list_records,
            methods=["GET"],
            name=f"{record}_list",
            response_model=List[shape],  # type: ignore[valid-type]
            responses={**_SERVER_ERROR},
            summary=f"List all {record} records",
        )

    # ── POST /{prefix}/{record} ───────────────────────────────────────────
    def make_create_endpoint(self, record: str, shape: Type[MongoDoc]) -> None:
        service = self.service_for(record, shape)

        async def create_record(
            request: Request,
            db: AsyncDatabase = Depends(self.get_db),
        ) -> Any:
            _log_request(request)
            payload = await read_json(request)
            return await service.create(db, payload)

        self.router.add_api_route(
            make_path(self.prefix, record),
            create_record,
            methods=["POST"],
            name=f"{record}_create",
            response_model=shape,
            responses={**_BAD_REQUEST, **_SERVER_ERROR},
            summary=f"Create a {record} record",
            description=f"Required fields: {', '.join(shape.required_fields) or 'none'}.",
            openapi_extra=_json_body(shape.model_json_schema()),
        )

    # ── PUT /{prefix}/{record}/{record_id} ────────────────────────────────
    def make_update_endpoint(self, record: str, shape: Type[MongoDoc]) -> None:
        service = self.service_for(record, shape)

        async def update_record(
            record_id: str,
            request: Request,
            db: AsyncDatabase = Depends(self.get_db),
        ) -> Any:
            _log_request(request)
            payload = await read_json(request)
            return await service.update(db, record_id, payload)

        self.router.add_api_route(
            make_path(self.prefix, record, "{record_id}"),
            update_record,
            methods=["PUT"],
            name=f"{record}_update",
            response_model=shape,
            responses={**_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR},
            summary=f"Update a {record} record",
            description="Fields missing from the body keep their stored values.",
            openapi_extra=_json_body(shape.model_json_schema()),
        )

    # ── DELETE /{prefix}/{record}/{record_id} ─────────────────────────────
    def make_remove_endpoint(self, record: str, shape: Type[MongoDoc]) -> None:
        service = self.service_for(record, shape)

        async def remove_record(
            record_id: str,
            request: Request,
            db: AsyncDatabase = Depends(self.get_db),
        ) -> Response:
            _log_request(request)
            await service.remove(db, record_id)
            return Response(status_code=200)

        self.router.add_api_route(
            make_path(self.prefix, record, "{record_id}"),
            remove_record,
            methods=["DELETE"],
            name=f"{record}_remove",
            responses={
                200: {"description": "Record removed (empty body)"},
                **_BAD_REQUEST, **_NOT_FOUND, **_SERVER_ERROR,
            },
            summary=f"Remove a {record} record",
        )

    # ── POST /{prefix}/{record}/_search ───────────────────────────────────
    def make_search_endpoint(self, record: str, shape: Type[MongoDoc]) -> None:
        service = self.service_for(record, shape)

        async def search_records(
            request: Request,
            db: AsyncDatabase = Depends(self.get_db),
        ) -> Any:
            _log_request(request)
            criteria = await read_json(request)
            return await service.search(db, criteria)

        self.router.add_api_route(
            make_path(self.prefix, record, SEARCH_SEGMENT),
            search_records,
            methods=["POST"],
            name=f"{record}_search",
            response_model=List[shape],  # type: ignore[valid-type]
            responses={**_BAD_REQUEST, **_SERVER_ERROR},
            summary=f"Search {record} records by field prefix",
            description=(
                'Body: {"field": "prefix", ...}. Each value matches the start of the '
                "field as a regular expression; all pairs must match."
            ),
            openapi_extra=_json_body(
                {"type": "object", "additionalProperties": {"type": "string"}}
            ),
        )
