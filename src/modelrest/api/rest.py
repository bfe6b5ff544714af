"""Read-only REST endpoints over registered entities."""

import logging
from typing import Any, Callable

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from modelrest.errors import (
    ModelRestError,
    ObjectNotFound,
    UnknownEntity,
    ViewNotFound,
)
from modelrest.metadata.loader import Schema
from modelrest.metadata.registry import SchemaRegistry
from modelrest.persistence.adapter import Executor
from modelrest.rest import handlers
from modelrest.rest.context import Pagination, RequestContext
from modelrest.rest.request import RequestParams
from modelrest.views.loader import ViewConfigLoader

logger = logging.getLogger(__name__)


def error_status(error: ModelRestError) -> int:
    """HTTP status for a request-level error."""
    if isinstance(error, (ObjectNotFound, UnknownEntity, ViewNotFound)):
        return 404
    return 400


def _resolve(registry: SchemaRegistry, table: str) -> Schema:
    """Find a schema by table name, falling back to the entity name."""
    schema = registry.find(table) or registry.get(table)
    if schema is None:
        raise UnknownEntity(table)
    return schema


def create_rest_router(
    get_registry: Callable[[], SchemaRegistry | None],
    get_db: Callable[[], Executor | None],
    get_views: Callable[[], ViewConfigLoader | None],
    prefix: str = "/api",
) -> APIRouter:
    """Create the REST router with injected dependencies."""
    router = APIRouter(prefix=f"{prefix.rstrip('/')}/rest", tags=["rest"])

    def _services() -> tuple[SchemaRegistry, Executor, ViewConfigLoader]:
        registry, db, views = get_registry(), get_db(), get_views()
        if registry is None or db is None or views is None:
            raise HTTPException(500, "Service not initialized")
        return registry, db, views

    def _respond(
        request: Request,
        table: str,
        operation: Callable[[RequestContext], Pagination],
        path_params: dict[str, str] | None = None,
    ) -> JSONResponse:
        registry, db, _ = _services()
        params = RequestParams(request.url.query, path_params or {})
        try:
            schema = _resolve(registry, table)
        except UnknownEntity as exc:
            response = Pagination()
            response.success = False
            response.error = str(exc)
            return JSONResponse(response.to_dict(), status_code=404)

        context = RequestContext(params, schema, registry, db.dialect)
        try:
            operation(context)
        except ModelRestError as exc:
            logger.info("%s %s failed: %s", request.method, request.url.path, exc)
            context.set_error(exc)
            return JSONResponse(context.response.to_dict(), status_code=error_status(exc))
        return JSONResponse(context.response.to_dict())

    @router.get("/models")
    async def list_models() -> dict[str, Any]:
        """List registered entities."""
        registry, _, views = _services()
        return {
            "data": [
                {
                    "name": schema.name,
                    "table": schema.table,
                    "filter_view": views.get_view(schema.name) is not None,
                }
                for schema in registry
            ]
        }

    @router.get("/{table}/info")
    async def model_info(table: str, request: Request) -> JSONResponse:
        return _respond(request, table, handlers.model_info)

    @router.get("/{table}/all")
    async def all_objects(table: str, request: Request) -> JSONResponse:
        _, db, _ = _services()
        return _respond(request, table, lambda ctx: handlers.all_objects(ctx, db))

    @router.get("/{table}/paginate")
    async def paginate(table: str, request: Request) -> JSONResponse:
        _, db, _ = _services()
        return _respond(request, table, lambda ctx: handlers.paginate(ctx, db))

    @router.get("/{table}/filter-view")
    @router.get("/{table}/filter-view/{url_params:path}")
    async def filter_view(table: str, request: Request, url_params: str = "") -> JSONResponse:
        """List view page. Extra path segments bind the view's URL parameters in order."""
        registry, db, views = _services()
        path_params: dict[str, str] = {}
        schema = registry.find(table) or registry.get(table)
        view = views.get_view(schema.name) if schema else None
        if view is not None and url_params:
            segments = url_params.strip("/").split("/")
            path_params = dict(zip((p.name for p in view.url_params), segments))
        return _respond(
            request,
            table,
            lambda ctx: handlers.filter_view_handler(ctx, db, views),
            path_params,
        )

    @router.get("/{table}/{pk:path}")
    async def get_object(table: str, pk: str, request: Request) -> JSONResponse:
        """Single object; composite keys are passed as consecutive path segments."""
        registry, db, _ = _services()
        path_params: dict[str, str] = {}
        schema = registry.find(table) or registry.get(table)
        if schema is not None:
            segments = pk.strip("/").split("/")
            path_params = dict(zip((f.db_name for f in schema.primary_fields), segments))
        return _respond(
            request,
            table,
            lambda ctx: handlers.get_object(ctx, db),
            path_params,
        )

    return router
