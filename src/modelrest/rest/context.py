"""Per-request context and the list-parameter orchestrator.

A RequestContext ties together the request accessor, the schema being
served and the response envelope. ``apply_filters`` reads the
recognized list parameters and populates a Query:

    associations  1 | true | deep | relation path
    order         comma list of "column direction" tokens
    fields        comma list of columns to project
    join          relation path to preload
    column[cond]=value filters
    offset, limit
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from modelrest.metadata.loader import Schema
from modelrest.metadata.registry import SchemaRegistry
from modelrest.query.associations import normalize_relation_path, walk_associations
from modelrest.query.builder import Query
from modelrest.query.filters import apply_filters, parse_filters
from modelrest.query.quoting import SQLITE, Dialect
from modelrest.rest.request import RequestParams

logger = logging.getLogger(__name__)


@dataclass
class Pagination:
    """Response envelope shared by every operation."""

    total: int = 1
    offset: int = 0
    total_pages: int = 1
    page: int = 1
    size: int = 1
    data: Any = None
    success: bool = True
    error: str = ""
    type: str = ""
    filter_view: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            # Failed responses carry no data or counters
            return {
                "total": 0,
                "offset": 0,
                "total_pages": 0,
                "current_page": 0,
                "size": 0,
                "data": 0,
                "success": False,
                "error": self.error,
                "type": self.type,
                "filter_view": None,
            }
        return {
            "total": self.total,
            "offset": self.offset,
            "total_pages": self.total_pages,
            "current_page": self.page,
            "size": self.size,
            "data": self.data,
            "success": True,
            "error": self.error,
            "type": self.type,
            "filter_view": self.filter_view,
        }


@dataclass
class RequestContext:
    """State for one request against one entity."""

    params: RequestParams
    schema: Schema
    registry: SchemaRegistry
    dialect: Dialect = SQLITE
    response: Pagination = field(default_factory=Pagination)

    def new_query(self) -> Query:
        """A Query over this context's table."""
        query = Query(self.registry, self.dialect)
        query.from_(self.schema.table)
        return query

    def set_error(self, error: Exception) -> None:
        self.response.error = str(error)
        self.response.success = False

    def apply_associations(self, query: Query) -> None:
        """Resolve the ``associations`` parameter into preloads."""
        association = self.params.get("associations")
        if not association:
            return
        if association in ("1", "true"):
            query.preload_associations = True
        elif association == "deep":
            for path in walk_associations("", self.schema, self.registry):
                query.preload(path)
        else:
            query.preload(normalize_relation_path(association))

    def preload_paths(self, query: Query) -> list[str]:
        """Relation paths to eager-load for ``query``'s rows."""
        paths = list(query.preloads)
        if query.preload_associations:
            paths.extend(r.name for r in self.schema.relations if r.name not in paths)
        return paths

    def apply_join(self, query: Query) -> None:
        join = self.params.get("join")
        if join:
            query.preload(normalize_relation_path(join))

    def apply_fields(self, query: Query) -> None:
        """Restrict the projection to the ``fields`` parameter."""
        fields = self.params.get("fields")
        if not fields:
            return
        for name in fields.split(","):
            name = name.strip()
            if self.schema.field_by_column(name) is None:
                logger.warning("Ignoring unknown field %r for %s", name, self.schema.table)
                continue
            query.select(f"{self.schema.table}.{name}")

    def select_relation_keys(self, query: Query) -> None:
        """Keep the columns preloading matches on in a restricted projection."""
        if not query.projection:
            return
        for path in self.preload_paths(query):
            relation = self.schema.relation(path.split(".")[0])
            if relation is not None:
                query.select(f"{self.schema.table}.{self.schema.local_key(relation)}")

    def apply_filters(self, query: Query) -> Query:
        """Populate ``query`` from the recognized request parameters.

        Raises:
            InvalidFilterColumn: A filter names an unknown column
            InvalidFilterCondition: A filter uses an unknown condition
        """
        self.apply_associations(query)

        order = self.params.get("order")
        if order and not query.order(order):
            logger.debug("Ignoring invalid order %r", order)

        self.apply_fields(query)
        self.apply_join(query)
        self.select_relation_keys(query)

        apply_filters(parse_filters(self.params.query_string), self.schema, query, self)

        offset = self.params.get_int("offset")
        if offset > 0:
            query.offset(offset)

        limit = self.params.get_int("limit")
        if limit > 0:
            query.limit(limit)
        return query
