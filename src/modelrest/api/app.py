"""FastAPI application."""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from modelrest.api.rest import create_rest_router
from modelrest.metadata.loader import MetadataLoader
from modelrest.metadata.registry import SchemaRegistry
from modelrest.metadata.validator import log_issues, validate_metadata_dir
from modelrest.persistence import DatabaseConfig, Executor, create_adapter
from modelrest.views.loader import ViewConfigLoader

logger = logging.getLogger(__name__)

# Global instances (initialized on startup)
registry: SchemaRegistry | None = None
db: Executor | None = None
view_loader: ViewConfigLoader | None = None


def metadata_path_from_env(base_path: Path) -> Path:
    """MODELREST_METADATA_PATH, else ``{base_path}/metadata``."""
    configured = os.environ.get("MODELREST_METADATA_PATH")
    if configured:
        return Path(configured)
    return base_path / "metadata"


def load_registry(metadata_path: Path) -> SchemaRegistry:
    loader = MetadataLoader(metadata_path)
    loader.load_all()
    return SchemaRegistry.from_loader(loader)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize on startup, cleanup on shutdown."""
    global registry, db, view_loader

    base_path = Path.cwd()
    metadata_path = metadata_path_from_env(base_path)

    # Validate metadata YAML files against JSON Schemas (warn on errors, don't block startup)
    log_issues(validate_metadata_dir(metadata_path))

    registry = load_registry(metadata_path)
    view_loader = ViewConfigLoader(metadata_path / "views")
    view_loader.load_all()

    db_config = DatabaseConfig.from_env(base_path)

    # Ensure parent directory exists for SQLite databases
    if db_config.is_sqlite and db_config.sqlite_path != ":memory:":
        Path(db_config.sqlite_path).parent.mkdir(parents=True, exist_ok=True)

    db = create_adapter(db_config)
    db.connect()

    # Create tables for all entities
    for schema in registry:
        db.initialize_entity(schema)

    logger.info(
        "Loaded %d entities and %d views from %s",
        len(registry),
        len(view_loader.list_views()),
        metadata_path,
    )

    yield

    # Cleanup
    if db:
        db.close()
        db = None


app = FastAPI(title="modelrest API", lifespan=lifespan)

# CORS for frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_registry() -> SchemaRegistry | None:
    return registry


def _get_db() -> Executor | None:
    return db


def _get_views() -> ViewConfigLoader | None:
    return view_loader


app.include_router(
    create_rest_router(
        get_registry=_get_registry,
        get_db=_get_db,
        get_views=_get_views,
        prefix=os.environ.get("MODELREST_PREFIX", "/api"),
    )
)


@app.get("/api/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
