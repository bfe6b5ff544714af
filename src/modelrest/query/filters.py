"""Query-string filter grammar and condition mapping.

Filters arrive as query-string entries of the form::

    column[condition]=value

for example ``?status[eq]=published&views[gte]=10&id[in]=1,2,3``.
Parsing is lenient: fragments that do not match the grammar are dropped.
Mapping is strict: an unknown column or condition fails the request,
since a silently ignored predicate would widen the result set.
"""

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable
from urllib.parse import unquote_plus

from modelrest.core.types import field_value
from modelrest.errors import InvalidFilterColumn, InvalidFilterCondition
from modelrest.query.quoting import quote

if TYPE_CHECKING:
    from modelrest.metadata.loader import Schema
    from modelrest.query.builder import Query


FILTER_PATTERN = re.compile(
    r"(?P<column>[A-Za-z0-9_-]+)\[(?P<condition>[A-Za-z0-9_-]+)\](?:=(?P<value>[A-Za-z0-9_\-%,+\s]*))?&*"
)

EQ = "eq"
NEQ = "neq"
GT = "gt"
LT = "lt"
GTE = "gte"
LTE = "lte"
IN = "in"
CONTAINS = "contains"
IS_NULL = "isnull"
NOT_NULL = "notnull"

# condition -> SQL operator
CONDITIONS: dict[str, str] = {
    EQ: "=",
    NEQ: "!=",
    GT: ">",
    LT: "<",
    GTE: ">=",
    LTE: "<=",
    IN: "IN",
    CONTAINS: "LIKE",
    IS_NULL: "IS NULL",
    NOT_NULL: "IS NOT NULL",
}

UNARY_CONDITIONS = (IS_NULL, NOT_NULL)


@dataclass(frozen=True)
class FilterPredicate:
    """One ``(column, condition, value)`` filter unit."""

    column: str
    condition: str
    value: str = ""


@runtime_checkable
class CustomFilter(Protocol):
    """Capability for field values that translate their own predicates.

    When the runtime value of a filtered field implements this method,
    the default condition mapping is skipped for that predicate.
    """

    def rest_filter(self, context: Any, query: "Query", predicate: FilterPredicate) -> None: ...


def parse_filters(query_string: str) -> list[FilterPredicate]:
    """Extract filter predicates from a raw query string, in source order."""
    if not query_string:
        return []
    # Clients commonly percent-encode the brackets
    normalized = re.sub("%5B", "[", query_string, flags=re.IGNORECASE)
    normalized = re.sub("%5D", "]", normalized, flags=re.IGNORECASE)

    predicates = []
    for match in FILTER_PATTERN.finditer(normalized):
        predicates.append(
            FilterPredicate(
                column=match.group("column"),
                condition=match.group("condition"),
                value=unquote_plus(match.group("value") or ""),
            )
        )
    return predicates


def apply_filter(
    predicate: FilterPredicate,
    schema: "Schema",
    query: "Query",
    context: Any = None,
) -> None:
    """Translate one predicate into a WHERE fragment on ``query``.

    Raises:
        InvalidFilterColumn: The column is not a field of ``schema``
        InvalidFilterCondition: The condition is not in the vocabulary
            and the field type does not implement CustomFilter
    """
    field = schema.field_by_column(predicate.column)
    if field is None:
        raise InvalidFilterColumn(predicate.column)

    value = field_value(field.type)
    if isinstance(value, CustomFilter):
        value.rest_filter(context, query, predicate)
        return

    column = quote(f"{schema.table}.{predicate.column}", query.dialect)
    condition = predicate.condition

    if condition in UNARY_CONDITIONS:
        if predicate.column == schema.soft_delete:
            query.unscope()
        query.where(f"{column} {CONDITIONS[condition]}")
    elif condition == CONTAINS:
        query.where(f"{column} LIKE ?", f"%{predicate.value}%")
    elif condition == IN:
        values = predicate.value.split(",")
        placeholders = ", ".join("?" for _ in values)
        query.where(f"{column} IN ({placeholders})", *values)
    elif condition in CONDITIONS:
        query.where(f"{column} {CONDITIONS[condition]} ?", predicate.value)
    else:
        raise InvalidFilterCondition(condition)


def apply_filters(
    predicates: list[FilterPredicate],
    schema: "Schema",
    query: "Query",
    context: Any = None,
) -> None:
    """Apply every predicate; the first invalid one aborts with an error."""
    for predicate in predicates:
        apply_filter(predicate, schema, query, context)
