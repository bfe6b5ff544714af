"""Query assembly — identifier quoting, filter grammar, relation walking, statement builder."""

from modelrest.query.associations import normalize_relation_path, walk_associations
from modelrest.query.builder import Query, Statement
from modelrest.query.filters import (
    CustomFilter,
    FilterPredicate,
    apply_filter,
    apply_filters,
    parse_filters,
)
from modelrest.query.quoting import MYSQL, POSTGRESQL, SQLITE, Dialect, quote

__all__ = [
    "CustomFilter",
    "Dialect",
    "FilterPredicate",
    "MYSQL",
    "POSTGRESQL",
    "Query",
    "SQLITE",
    "Statement",
    "apply_filter",
    "apply_filters",
    "normalize_relation_path",
    "parse_filters",
    "quote",
    "walk_associations",
]
