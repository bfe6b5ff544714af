"""Tests for the filter grammar parser and condition mapper."""

import pytest

from modelrest.core.types import FIELD_TYPES, FieldType, register_field_type
from modelrest.errors import InvalidFilterColumn, InvalidFilterCondition
from modelrest.metadata.loader import Field, Schema
from modelrest.metadata.registry import SchemaRegistry
from modelrest.query.builder import Query
from modelrest.query.filters import (
    FilterPredicate,
    apply_filter,
    apply_filters,
    parse_filters,
)


@pytest.fixture
def schema():
    return Schema(
        name="Item",
        table="items",
        fields=(
            Field("id", "id", "integer", primary_key=True),
            Field("name", "name"),
            Field("deletedAt", "deleted_at", "datetime"),
        ),
        soft_delete="deleted_at",
    )


@pytest.fixture
def query(schema):
    q = Query(SchemaRegistry([schema]))
    q.from_("items")
    return q


class TestParseFilters:
    """Test parse_filters() grammar."""

    def test_two_predicates_in_order(self):
        predicates = parse_filters("name[eq]=v1&id[gt]=v2")
        assert predicates == [
            FilterPredicate("name", "eq", "v1"),
            FilterPredicate("id", "gt", "v2"),
        ]

    def test_percent_decoding(self):
        predicates = parse_filters("name[contains]=hello%20world")
        assert predicates[0].value == "hello world"

    def test_plus_decodes_to_space(self):
        assert parse_filters("name[eq]=a+b")[0].value == "a b"

    def test_encoded_brackets(self):
        predicates = parse_filters("name%5Beq%5D=x&id%5bin%5d=1,2")
        assert predicates == [
            FilterPredicate("name", "eq", "x"),
            FilterPredicate("id", "in", "1,2"),
        ]

    def test_unary_without_value(self):
        assert parse_filters("deleted_at[notnull]")[0] == FilterPredicate(
            "deleted_at", "notnull", ""
        )

    def test_ignores_other_parameters(self):
        predicates = parse_filters("order=name asc&limit=10&name[eq]=x")
        assert predicates == [FilterPredicate("name", "eq", "x")]

    def test_empty(self):
        assert parse_filters("") == []


class TestApplyFilter:
    """Test condition-to-SQL mapping."""

    @pytest.mark.parametrize(
        "condition,operator",
        [("eq", "="), ("neq", "!="), ("gt", ">"), ("lt", "<"), ("gte", ">="), ("lte", "<=")],
    )
    def test_comparison_operators(self, schema, query, condition, operator):
        apply_filter(FilterPredicate("name", condition, "x"), schema, query)
        statement = query.render_data()
        assert f"`name` {operator} ?" in statement.sql
        assert statement.params == ("x",)

    def test_contains_wraps_value(self, schema, query):
        apply_filter(FilterPredicate("name", "contains", "ada"), schema, query)
        statement = query.render_data()
        assert "`name` LIKE ?" in statement.sql
        assert statement.params == ("%ada%",)

    def test_contains_form_encoded_value(self, schema, query):
        apply_filters(parse_filters("name[contains]=hello+world&id[gt]=1"), schema, query)
        statement = query.render_data()
        assert statement.params == ("%hello world%", "1")

    def test_in_expands_placeholders(self, schema, query):
        apply_filter(FilterPredicate("id", "in", "1,2,3"), schema, query)
        statement = query.render_data()
        assert "`id` IN (?, ?, ?)" in statement.sql
        assert statement.params == ("1", "2", "3")

    def test_isnull(self, schema, query):
        apply_filter(FilterPredicate("name", "isnull"), schema, query)
        assert "`name` IS NULL" in query.render_data().sql
        assert not query.unscoped

    def test_notnull_on_soft_delete_column_unscopes(self, schema, query):
        apply_filter(FilterPredicate("deleted_at", "notnull"), schema, query)
        sql = query.render_data().sql
        assert "`deleted_at` IS NOT NULL" in sql
        assert "`items`.`deleted_at` IS NULL" not in sql
        assert query.unscoped

    def test_unknown_column(self, schema, query):
        with pytest.raises(InvalidFilterColumn, match="column does not exist: missing"):
            apply_filter(FilterPredicate("missing", "eq", "x"), schema, query)

    def test_unknown_condition(self, schema, query):
        with pytest.raises(InvalidFilterCondition, match="invalid filter condition like"):
            apply_filter(FilterPredicate("name", "like", "x"), schema, query)

    def test_first_invalid_predicate_aborts(self, schema, query):
        predicates = parse_filters("name[eq]=x&missing[eq]=y")
        with pytest.raises(InvalidFilterColumn):
            apply_filters(predicates, schema, query)


class Tags:
    """Field value that translates its own predicates."""

    calls: list = []

    def rest_filter(self, context, query, predicate):
        Tags.calls.append((context, predicate))
        query.where("`tags` LIKE ?", f"%|{predicate.value}|%")


class TestCustomFilter:
    """Test field types that take over predicate translation."""

    @pytest.fixture(autouse=True)
    def tags_type(self):
        register_field_type(FieldType(name="tags", storage_type="TEXT", value_type=Tags))
        Tags.calls = []
        yield
        FIELD_TYPES.pop("tags", None)

    @pytest.fixture
    def tagged(self):
        return Schema(
            name="Doc",
            table="docs",
            fields=(Field("id", "id", "integer", primary_key=True), Field("tags", "tags", "tags")),
        )

    def test_delegates_any_condition(self, tagged):
        query = Query(SchemaRegistry([tagged]))
        query.from_("docs")
        apply_filter(FilterPredicate("tags", "has", "red"), tagged, query, context="ctx")

        statement = query.render_data()
        assert "`tags` LIKE ?" in statement.sql
        assert statement.params == ("%|red|%",)
        assert Tags.calls == [("ctx", FilterPredicate("tags", "has", "red"))]

    def test_remaining_predicates_still_apply(self, tagged):
        query = Query(SchemaRegistry([tagged]))
        query.from_("docs")
        apply_filters(parse_filters("tags[has]=red&id[gt]=3"), tagged, query)

        statement = query.render_data()
        assert "`id` > ?" in statement.sql
        assert statement.params == ("%|red|%", "3")
