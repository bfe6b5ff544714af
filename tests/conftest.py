"""Shared fixtures: the sample blog metadata and a seeded SQLite database."""

from pathlib import Path

import pytest

from modelrest.metadata.loader import MetadataLoader
from modelrest.metadata.registry import SchemaRegistry
from modelrest.persistence.sqlite import SQLiteAdapter
from modelrest.rest.context import RequestContext
from modelrest.rest.request import RequestParams
from modelrest.views.loader import ViewConfigLoader

METADATA_DIR = Path(__file__).resolve().parents[1] / "metadata"

USERS = [
    {"id": 1, "name": "Ada", "email": "ada@example.com", "deleted_at": None},
    {"id": 2, "name": "Grace", "email": "grace@example.com", "deleted_at": None},
    {"id": 3, "name": "Linus", "email": "linus@example.com", "deleted_at": "2024-01-01"},
]
PROFILES = [
    {"id": 1, "user_id": 1, "bio": "Mathematician"},
    {"id": 2, "user_id": 2, "bio": "Admiral"},
]
POSTS = [
    {"id": 1, "author_id": 1, "title": "Engines", "status": "published", "views": 120, "deleted_at": None},
    {"id": 2, "author_id": 1, "title": "Notes", "status": "draft", "views": 5, "deleted_at": None},
    {"id": 3, "author_id": 2, "title": "Compilers", "status": "published", "views": 300, "deleted_at": None},
    {"id": 4, "author_id": 2, "title": "Bugs", "status": "published", "views": 42, "deleted_at": "2024-02-02"},
]
COMMENTS = [
    {"id": 1, "post_id": 1, "user_id": 2, "body": "Great"},
    {"id": 2, "post_id": 1, "user_id": 1, "body": "Thanks"},
    {"id": 3, "post_id": 3, "user_id": 1, "body": "Nice"},
]


@pytest.fixture
def registry():
    loader = MetadataLoader(METADATA_DIR)
    loader.load_all()
    return SchemaRegistry.from_loader(loader)


@pytest.fixture
def views():
    loader = ViewConfigLoader(METADATA_DIR / "views")
    loader.load_all()
    return loader


def seed(db, registry):
    for name, rows in (
        ("User", USERS),
        ("Profile", PROFILES),
        ("Post", POSTS),
        ("Comment", COMMENTS),
    ):
        schema = registry.get(name)
        for row in rows:
            db.insert(schema, row)


@pytest.fixture
def db(registry):
    """In-memory SQLite database with the blog tables and sample rows."""
    adapter = SQLiteAdapter(":memory:")
    adapter.connect()
    for schema in registry:
        adapter.initialize_entity(schema)
    seed(adapter, registry)
    yield adapter
    adapter.close()


@pytest.fixture
def make_context(registry):
    """Build a RequestContext for an entity from a query string."""

    def _make(entity: str, query_string: str = "", path_params=None) -> RequestContext:
        return RequestContext(
            RequestParams(query_string, path_params),
            registry.get(entity),
            registry,
        )

    return _make


@pytest.fixture
def db_file(tmp_path, registry):
    """Seeded SQLite database file, closed and ready for another connection."""
    db_path = tmp_path / "test.db"
    adapter = SQLiteAdapter(db_path)
    adapter.connect()
    for schema in registry:
        adapter.initialize_entity(schema)
    seed(adapter, registry)
    adapter.close()
    return db_path
