"""Read operations over registered entities.

Each operation fills the context's response envelope and returns it.
Request-level failures raise ModelRestError subclasses; the caller turns
them into an unsuccessful envelope with ``context.set_error``.
"""

import logging
from typing import Any

from modelrest.errors import ObjectNotFound, ViewNotFound
from modelrest.persistence.adapter import Executor
from modelrest.persistence.preload import load_preloads
from modelrest.query.builder import Query
from modelrest.query.filters import apply_filters, parse_filters
from modelrest.query.quoting import quote
from modelrest.rest.context import Pagination, RequestContext
from modelrest.rest.filterview import get_data
from modelrest.rest.pagination import reconcile_pagination, total_pages
from modelrest.views.loader import ViewConfigLoader

logger = logging.getLogger(__name__)

FILTER_VIEW_TYPE = "filterview"


def _fetch(context: RequestContext, executor: Executor, query: Query) -> list[dict[str, Any]]:
    rows = executor.fetch_all(query.render_data())
    paths = context.preload_paths(query)
    if paths:
        load_preloads(executor, context.registry, context.schema, rows, paths)
    return rows


def all_objects(context: RequestContext, executor: Executor) -> Pagination:
    """Filtered listing without paging."""
    query = context.apply_filters(context.new_query())
    rows = _fetch(context, executor, query)

    response = context.response
    response.data = rows
    response.total = len(rows)
    response.size = len(rows)
    response.offset = context.params.get_int("offset")
    return response


def paginate(context: RequestContext, executor: Executor) -> Pagination:
    """Filtered listing of one page plus the total row count.

    ``page`` is 1-based; ``size`` is clamped like list views.
    """
    window = reconcile_pagination(
        context.params.get_int("offset"),
        context.params.get_int("page"),
        context.params.get_int("size"),
    )
    query = context.apply_filters(context.new_query())
    query.limit(window.size)
    query.offset(window.offset)

    response = context.response
    response.total = executor.fetch_count(query.render_count())
    response.data = _fetch(context, executor, query)
    response.offset = window.offset
    response.size = window.size
    response.page = window.page + 1
    response.total_pages = total_pages(response.total, window.size)
    return response


def get_object(context: RequestContext, executor: Executor) -> Pagination:
    """Single row by primary key, with association/join preloads and filters.

    Raises:
        ObjectNotFound: No row matches the key
    """
    schema = context.schema
    query = context.new_query()
    context.apply_associations(query)
    context.apply_join(query)
    apply_filters(parse_filters(context.params.query_string), schema, query, context)

    for field in schema.primary_fields:
        column = quote(f"{schema.table}.{field.db_name}", query.dialect)
        query.where(f"{column} = ?", context.params.param(field.db_name))
    query.limit(1)

    rows = _fetch(context, executor, query)
    if not rows:
        raise ObjectNotFound(schema.table)

    context.response.data = rows[0]
    return context.response


def filter_view_handler(
    context: RequestContext,
    executor: Executor,
    views: ViewConfigLoader,
) -> Pagination:
    """Render the entity's list view for the requested page.

    Raises:
        ViewNotFound: The entity declares no list view
    """
    view = views.get_view(context.schema.name)
    if view is None:
        raise ViewNotFound(context.schema.name)

    window = reconcile_pagination(
        context.params.get_int("offset"),
        context.params.get_int("page"),
        context.params.get_int("size"),
    )
    total, data = get_data(
        view, window.offset, window.size, context.params, context.registry, executor
    )

    response = context.response
    response.total = total
    response.offset = window.offset
    response.size = window.size
    response.page = window.page + 1
    response.total_pages = total_pages(total, window.size)
    response.data = data
    response.filter_view = view.to_dict()
    response.type = FILTER_VIEW_TYPE
    return response


def model_info(context: RequestContext) -> Pagination:
    """Describe the entity's fields and relations."""
    schema = context.schema
    context.response.data = {
        "name": schema.name,
        "id": schema.table,
        "fields": [
            {
                "label": f.name,
                "name": f.db_name,
                "type": f.type,
                "default": f.default,
                "pk": f.primary_key,
            }
            for f in schema.fields
        ],
        "relations": [
            {
                "name": r.name,
                "kind": r.kind,
                "entity": r.entity,
                "foreign_key": r.foreign_key,
            }
            for r in schema.relations
        ],
    }
    return context.response
