"""Tests for MetadataLoader and SchemaRegistry."""

from pathlib import Path

import pytest

from modelrest.errors import MetadataError
from modelrest.metadata.loader import (
    BELONGS_TO,
    HAS_MANY,
    HAS_ONE,
    MetadataLoader,
    to_snake_case,
)
from modelrest.metadata.registry import SchemaRegistry


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


@pytest.fixture
def metadata_dir(tmp_path):
    _write(
        tmp_path / "entities" / "tag.yaml",
        """
entity: BlogTag
fields:
  - name: id
  - name: label
  - name: archivedAt
    type: datetime
softDelete: archived_at
""",
    )
    return tmp_path


class TestMetadataLoader:
    """Test entity resolution from YAML."""

    def test_blog_entities(self, registry):
        assert sorted(registry.names()) == ["Comment", "Post", "Profile", "User"]

    def test_columns_default_to_snake_case(self, registry):
        post = registry.get("Post")
        assert [f.db_name for f in post.fields] == [
            "id", "author_id", "title", "status", "views", "deleted_at",
        ]

    def test_soft_delete_detected(self, registry):
        assert registry.get("Post").soft_delete == "deleted_at"
        assert registry.get("Comment").soft_delete is None

    def test_relations(self, registry):
        user = registry.get("User")
        assert [(r.kind, r.name) for r in user.relations] == [
            (HAS_ONE, "Profile"),
            (HAS_MANY, "Posts"),
        ]
        assert user.relation("Profile").foreign_key == "user_id"
        assert user.relation("Posts").foreign_key == "author_id"

        comment = registry.get("Comment")
        assert comment.relation("Post").kind == BELONGS_TO
        assert comment.relation("Post").foreign_key == "post_id"

    def test_primary_key(self, registry):
        assert registry.get("Post").primary_key == "id"

    def test_table_defaults_and_pk_fallback(self, metadata_dir):
        loader = MetadataLoader(metadata_dir)
        loader.load_all()
        tag = loader.get_entity("BlogTag")
        assert tag.table == "blog_tag"
        assert tag.primary_key == "id"
        assert tag.soft_delete == "archived_at"

    def test_missing_directory_loads_nothing(self, tmp_path):
        loader = MetadataLoader(tmp_path / "missing")
        loader.load_all()
        assert loader.list_entities() == []

    def test_unknown_relation_target(self, tmp_path):
        _write(
            tmp_path / "entities" / "a.yaml",
            """
entity: A
fields:
  - name: id
relations:
  - name: B
    kind: belongsTo
    entity: B
""",
        )
        with pytest.raises(MetadataError, match="unknown entity 'B'"):
            MetadataLoader(tmp_path).load_all()

    def test_invalid_relation_kind(self, tmp_path):
        _write(
            tmp_path / "entities" / "a.yaml",
            """
entity: A
fields:
  - name: id
relations:
  - name: A
    kind: manyToMany
    entity: A
""",
        )
        with pytest.raises(MetadataError, match="invalid kind"):
            MetadataLoader(tmp_path).load_all()

    def test_no_primary_key(self, tmp_path):
        _write(
            tmp_path / "entities" / "a.yaml",
            """
entity: A
fields:
  - name: code
""",
        )
        with pytest.raises(MetadataError, match="no primary key"):
            MetadataLoader(tmp_path).load_all()

    def test_soft_delete_must_be_a_field(self, tmp_path):
        _write(
            tmp_path / "entities" / "a.yaml",
            """
entity: A
fields:
  - name: id
softDelete: removed_at
""",
        )
        with pytest.raises(MetadataError, match="softDelete"):
            MetadataLoader(tmp_path).load_all()


class TestToSnakeCase:
    def test_conversion(self):
        assert to_snake_case("authorId") == "author_id"
        assert to_snake_case("BlogTag") == "blog_tag"
        assert to_snake_case("id") == "id"


class TestSchemaRegistry:
    """Test registry lookup and copy-on-write replacement."""

    def test_find_by_table(self, registry):
        assert registry.find("posts").name == "Post"
        assert registry.find("missing") is None

    def test_get_by_name(self, registry):
        assert registry.get("User").table == "users"
        assert "User" in registry
        assert len(registry) == 4

    def test_replace_leaves_original(self, registry):
        replaced = registry.replace([registry.get("User")])
        assert len(replaced) == 1
        assert len(registry) == 4
        assert replaced.find("posts") is None

    def test_mappings_are_read_only(self, registry):
        with pytest.raises(TypeError):
            registry._by_name["X"] = None

    def test_empty(self):
        assert len(SchemaRegistry()) == 0
