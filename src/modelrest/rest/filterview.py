"""List-view projector.

Turns a FilterView declaration plus request parameters into a count and
a page of rows, each row rendered as a list of cells in column order.
"""

import logging
from typing import Any

from markupsafe import escape

from modelrest.errors import UnknownEntity
from modelrest.metadata.registry import SchemaRegistry
from modelrest.persistence.adapter import Executor
from modelrest.query.builder import Query
from modelrest.query.quoting import split_identifier
from modelrest.rest.processors import ProcessorRegistry
from modelrest.rest.request import RequestParams
from modelrest.rest.templates import render_template
from modelrest.views.types import Action, Filter, FilterView, FilterViewColumn

logger = logging.getLogger(__name__)


def build_query(
    view: FilterView,
    offset: int,
    size: int,
    params: RequestParams,
    registry: SchemaRegistry,
    executor: Executor,
) -> Query:
    """Build the listing query for one page of ``view``.

    Raises:
        UnknownEntity: The view's entity is not registered
    """
    schema = registry.get(view.entity)
    if schema is None:
        raise UnknownEntity(view.entity)

    query = Query(registry, executor.dialect)
    query.from_(schema.table)
    for column in view.columns:
        if column.selects:
            query.select(column.db_field)

    query.select(f"{schema.table}.{schema.primary_key}", "pk")
    for item in view.select:
        query.select(item.select, item.alias)

    for join in view.join:
        query.from_(join.table)
        if join.condition:
            query.where(join.condition)

    for url_param in view.url_params:
        value = params.param(url_param.name)
        if value:
            _bind_filter(query, url_param, value)

    for item in view.filters:
        value = params.get(item.name)
        if value:
            _bind_filter(query, item, value)

    for condition in view.condition:
        query.where(condition)

    sort = params.get("sort") or params.get("order")
    if not (sort and query.order(sort)) and view.order:
        query.order(",".join(view.order))

    query.limit(size)
    query.offset(offset)
    return query


def _bind_filter(query: Query, item: Filter, value: str) -> None:
    query.where(item.filter, *([value] * item.filter.count("?")))


def get_data(
    view: FilterView,
    offset: int,
    size: int,
    params: RequestParams,
    registry: SchemaRegistry,
    executor: Executor,
) -> tuple[int, list[list[Any]]]:
    """Fetch one page of ``view``.

    Returns:
        (total matching rows, rendered rows)
    """
    query = build_query(view, offset, size, params, registry, executor)
    total = executor.fetch_count(query.render_count())
    rows = executor.fetch_all(query.render_data())
    return total, [render_row(view, row) for row in rows]


def render_row(view: FilterView, row: dict[str, Any]) -> list[Any]:
    return [render_cell(column, row) for column in view.columns]


def render_cell(column: FilterViewColumn, row: dict[str, Any]) -> Any:
    """Render one cell: action buttons, processor output or the field value.

    A column href wraps the computed value in an anchor.
    """
    if column.actions:
        return [
            Action(
                type=action.type,
                href=render_template(action.href, row),
                on_click=render_template(action.on_click, row),
                text=action.text,
                icon=action.icon,
            ).to_dict()
            for action in column.actions
        ]

    if column.processor:
        value = ProcessorRegistry.get(column.processor)(row)
    else:
        value = _field_value(column.db_field, row)

    if column.href:
        href = render_template(column.href, row)
        return f'<a href="{escape(href)}">{escape(value)}</a>'
    return value


def _field_value(db_field: str, row: dict[str, Any]) -> str:
    """Stringify a column's value; ``table.column`` reads the ``column`` key."""
    if db_field in row:
        value = row[db_field]
    else:
        _, column = split_identifier(db_field)
        value = row.get(column)
    return "" if value is None else str(value)
