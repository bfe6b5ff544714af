"""Tests for the list-view projector, row templates and value processors."""

import pytest

from modelrest.errors import UnknownEntity
from modelrest.rest.filterview import build_query, get_data, render_cell
from modelrest.rest.processors import ProcessorRegistry, processor
from modelrest.rest.request import RequestParams
from modelrest.rest.templates import render_template
from modelrest.views.types import Action, FilterView, FilterViewColumn


class TestBuildQuery:
    """Test the statements generated for a view."""

    def test_projection_and_joins(self, views, registry, db):
        query = build_query(views.get_view("Post"), 0, 25, RequestParams(), registry, db)
        sql = query.render_data().sql
        assert sql.startswith(
            "SELECT `posts`.`id`,`posts`.`title`,`users`.`name`,`posts`.`status`,"
            "`posts`.`id` AS `pk`,`users`.`name` AS `author_name` FROM `posts`,`users`"
        )
        assert "`posts`.`author_id` = `users`.`id`" in sql
        assert "posts.views >= 0" in sql
        assert "`posts`.`deleted_at` IS NULL" in sql
        assert sql.endswith("ORDER BY `posts`.`id` ASC LIMIT 25 OFFSET 0")

    def test_filters_are_bound(self, views, registry, db):
        params = RequestParams("status=draft", {"author": "1"})
        statement = build_query(views.get_view("Post"), 0, 25, params, registry, db).render_count()
        assert "posts.author_id = ?" in statement.sql
        assert "posts.status = ?" in statement.sql
        assert statement.params == ("1", "draft")

    def test_sort_overrides_default_order(self, views, registry, db):
        params = RequestParams("sort=posts.title desc")
        sql = build_query(views.get_view("Post"), 0, 25, params, registry, db).render_data().sql
        assert "ORDER BY `posts`.`title` DESC LIMIT" in sql

    def test_invalid_sort_falls_back(self, views, registry, db):
        params = RequestParams("sort=title;drop")
        sql = build_query(views.get_view("Post"), 0, 25, params, registry, db).render_data().sql
        assert "ORDER BY `posts`.`id` ASC" in sql

    def test_unknown_entity(self, registry, db):
        with pytest.raises(UnknownEntity):
            build_query(FilterView(entity="Ghost"), 0, 25, RequestParams(), registry, db)


class TestGetData:
    """Test fetching and rendering a page."""

    def test_first_page(self, views, registry, db):
        total, rows = get_data(views.get_view("Post"), 0, 25, RequestParams(), registry, db)
        assert total == 3
        assert rows[0] == [
            "1",
            '<a href="/posts/1">Engines</a>',
            "Ada",
            "published",
            [{"type": "button", "href": "/posts/1/edit", "text": "Edit", "icon": "pencil"}],
        ]
        assert [r[0] for r in rows] == ["1", "2", "3"]

    def test_count_ignores_paging(self, views, registry, db):
        total, rows = get_data(views.get_view("Post"), 2, 2, RequestParams(), registry, db)
        assert total == 3
        assert [r[0] for r in rows] == ["3"]

    def test_filter_and_url_param(self, views, registry, db):
        params = RequestParams("status=published", {"author": "1"})
        total, rows = get_data(views.get_view("Post"), 0, 25, params, registry, db)
        assert total == 1
        assert rows[0][2] == "Ada"


class TestRenderCell:
    """Test cell rendering rules."""

    @pytest.fixture(autouse=True)
    def clear_processors(self):
        yield
        ProcessorRegistry.clear()

    def test_plain_field(self):
        column = FilterViewColumn(title="Title", db_field="posts.title")
        assert render_cell(column, {"title": "Engines"}) == "Engines"

    def test_missing_value_renders_empty(self):
        column = FilterViewColumn(title="Title", db_field="title")
        assert render_cell(column, {"title": None}) == ""

    def test_processor_gets_full_row(self):
        @processor("shout")
        def shout(row):
            return f"{row['title'].upper()}!"

        column = FilterViewColumn(title="Title", db_field="-", processor="shout")
        assert render_cell(column, {"title": "hi"}) == "HI!"

    def test_href_wraps_processor_output(self):
        processor("id")(lambda row: str(row["pk"]))
        column = FilterViewColumn(title="ID", processor="id", href="/x/{{ pk }}")
        assert render_cell(column, {"pk": 4}) == '<a href="/x/4">4</a>'

    def test_anchor_text_is_escaped(self):
        column = FilterViewColumn(title="Title", db_field="title", href="/p/{{ pk }}")
        cell = render_cell(column, {"title": "<b>x</b>", "pk": 1})
        assert cell == '<a href="/p/1">&lt;b&gt;x&lt;/b&gt;</a>'

    def test_actions_render_templates(self):
        column = FilterViewColumn(
            title="",
            actions=(Action(type="button", href="/e/{{ pk }}", on_click="go({{ pk }})", text="Go"),),
        )
        assert render_cell(column, {"pk": 9}) == [
            {"type": "button", "href": "/e/9", "on_click": "go(9)", "text": "Go"}
        ]


class TestRenderTemplate:
    def test_substitutes_row_values(self):
        assert render_template("/u/{{ id }}/{{ name }}", {"id": 1, "name": "ada"}) == "/u/1/ada"

    def test_failure_renders_empty(self):
        assert render_template("{{ id | nosuchfilter }}", {"id": 1}) == ""
        assert render_template("{% if %}", {}) == ""

    def test_empty_template(self):
        assert render_template("", {"id": 1}) == ""


class TestProcessorRegistry:
    @pytest.fixture(autouse=True)
    def clear(self):
        ProcessorRegistry.clear()
        yield
        ProcessorRegistry.clear()

    def test_register_and_get(self):
        ProcessorRegistry.register("x", lambda row: "x")
        assert ProcessorRegistry.is_registered("x")
        assert ProcessorRegistry.get("x")({}) == "x"
        assert ProcessorRegistry.list_registered() == ["x"]

    def test_get_unregistered(self):
        with pytest.raises(ValueError, match="not registered"):
            ProcessorRegistry.get("missing")
