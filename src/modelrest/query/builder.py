"""Generic SELECT/COUNT statement builder.

A Query accumulates projection, sources, conditions, grouping, ordering
and paging for one request, then renders two statements that share the
same FROM/WHERE state: a row count and the data query.

Usage:
    query = Query(registry)
    query.select("posts.title")
    query.where("`posts`.`status` = ?", "published")
    query.order("title.asc")
    query.limit(10)
    count = query.render_count()
    data = query.render_data()
"""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from modelrest.query.quoting import SQLITE, Dialect, is_expression, quote, quote_part, split_identifier

if TYPE_CHECKING:
    from modelrest.metadata.loader import Schema
    from modelrest.metadata.registry import SchemaRegistry


# "[table.]column(.| )direction", e.g. "name asc", "users.name.DESC"
ORDER_PATTERN = re.compile(
    r"^\s*(?P<c1>[A-Za-z0-9_-]+)(?:\.(?P<c2>[A-Za-z0-9_-]+))?(?:\s+|\.)(?P<sort>asc|desc)\s*$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class Statement:
    """A rendered SQL statement with ``?`` placeholders and bound values."""

    sql: str
    params: tuple[Any, ...] = ()


def parse_int(value: Any) -> int:
    """Parse an integer leniently; anything unparseable becomes 0."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        try:
            return int(float(str(value).strip()))
        except (TypeError, ValueError, OverflowError):
            return 0


class Query:
    """Per-request statement builder.

    Tables added with ``from_()`` that resolve to a registered schema are
    joined to the first one using the schemas' declared relationships when
    the statements are rendered.
    """

    def __init__(self, registry: "SchemaRegistry | None" = None, dialect: Dialect = SQLITE):
        self.registry = registry
        self.dialect = dialect
        self._select: list[str] = []
        self._from: list[str] = []
        self._where: list[str] = []
        self._params: list[Any] = []
        self._group_by: str = ""
        self._order: list[tuple[str | None, str, str]] = []
        self._limit: str | None = None
        self._offset: str | None = None
        self._joins: list["Schema"] = []
        self._raw: Statement | None = None
        self.preloads: list[str] = []
        self.preload_associations = False
        self.unscoped = False

    # ------------------------------------------------------------------
    # Accumulators
    # ------------------------------------------------------------------

    def raw(self, sql: str, *params: Any) -> None:
        """Use ``sql`` verbatim for both renderers, ignoring builder state."""
        self._raw = Statement(sql, tuple(params))

    def select(self, column: str, alias: str | None = None) -> None:
        """Add a projected column or parenthesised expression."""
        expr = self.quote_select(column)
        if alias:
            expr = f"{expr} AS {quote_part(alias, self.dialect)}"
        if expr not in self._select:
            self._select.append(expr)

    def quote_select(self, column: str) -> str:
        """Quote a select token; ``table.column`` also registers the table."""
        if is_expression(column):
            return column.strip()
        table, _ = split_identifier(column)
        if table is not None:
            self.from_(table)
        return quote(column, self.dialect)

    def from_(self, table: str) -> None:
        """Add a source table, registering its schema for join inference."""
        quoted = quote(table, self.dialect)
        if quoted in self._from:
            return
        if self.registry is not None:
            _, name = split_identifier(table)
            schema = self.registry.find(name)
            if schema is not None:
                self._joins.append(schema)
        self._from.append(quoted)

    def where(self, condition: str, *params: Any) -> None:
        """Add an AND-combined condition with its bound values."""
        self._where.append(condition)
        self._params.extend(params)

    def group_by(self, expr: str) -> None:
        self._group_by = expr

    def order(self, clause: str) -> bool:
        """Add ordering from a comma-separated list of order tokens.

        Either every token is valid and all are applied, or none is.
        A ``table.column`` token is valid when its table is already a
        source or is registered, in which case it becomes a source.
        Returns whether the ordering was applied.
        """
        parsed: list[tuple[str | None, str, str]] = []
        tables = []
        for token in clause.split(","):
            match = ORDER_PATTERN.match(token)
            if match is None:
                return False
            table, column = None, match.group("c1")
            if match.group("c2"):
                table, column = column, match.group("c2")
                if quote(table, self.dialect) not in self._from:
                    if self.registry is None or self.registry.find(table) is None:
                        return False
                    tables.append(table)
            parsed.append((table, column, match.group("sort").upper()))
        for table in tables:
            self.from_(table)
        self._order.extend(parsed)
        return True

    def limit(self, value: Any) -> None:
        self._limit = str(value)

    def offset(self, value: Any) -> None:
        self._offset = str(value)

    def preload(self, path: str) -> None:
        """Request eager loading of a dotted relation path."""
        if path and path not in self.preloads:
            self.preloads.append(path)

    def unscope(self) -> None:
        """Lift the default soft-delete exclusion."""
        self.unscoped = True

    @property
    def projection(self) -> tuple[str, ...]:
        """Rendered select expressions; empty means every column."""
        return tuple(self._select)

    @property
    def root(self) -> "Schema | None":
        """Schema of the first registered source table."""
        return self._joins[0] if self._joins else None

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _conditions(self) -> list[str]:
        conditions = list(self._where)
        root = self.root
        if root is not None:
            conditions.extend(root.join(self.registry, self._joins[1:], self.dialect))
            if root.soft_delete and not self.unscoped:
                conditions.append(
                    f"{quote(f'{root.table}.{root.soft_delete}', self.dialect)} IS NULL"
                )
        return [c for c in conditions if c.strip()]

    def _order_by(self) -> str:
        # Bare columns belong to the root once other tables are joined
        default_table = self.root.table if self.root is not None and len(self._from) > 1 else None
        parts = []
        for table, column, direction in self._order:
            table = table or default_table
            name = f"{table}.{column}" if table else column
            parts.append(f"{quote(name, self.dialect)} {direction}")
        return ",".join(parts)

    def _from_where(self) -> str:
        sql = " FROM " + ",".join(self._from)
        conditions = self._conditions()
        if conditions:
            sql += " WHERE " + " AND ".join(conditions)
        return sql

    def render_count(self) -> Statement:
        """Render the row-count statement."""
        if self._raw is not None:
            return self._raw
        sql = f"SELECT COUNT(*) AS {quote_part('count', self.dialect)}" + self._from_where()
        return Statement(sql, tuple(self._params))

    def render_data(self) -> Statement:
        """Render the data statement."""
        if self._raw is not None:
            return self._raw
        if self._select:
            columns = ",".join(self._select)
        elif len(self._from) > 1 and self.root is not None:
            # Joined sources must not shadow the root's columns
            columns = f"{quote(self.root.table, self.dialect)}.*"
        else:
            columns = "*"
        sql = f"SELECT {columns}" + self._from_where()
        if self._group_by:
            sql += f" GROUP BY {self._group_by}"
        if self._order:
            sql += " ORDER BY " + self._order_by()
        if self._limit is not None:
            sql += f" LIMIT {parse_int(self._limit)}"
        elif self._offset is not None and self.dialect.unbounded_limit:
            sql += f" LIMIT {self.dialect.unbounded_limit}"
        if self._offset is not None:
            sql += f" OFFSET {parse_int(self._offset)}"
        return Statement(sql, tuple(self._params))
