"""FastAPI adapter."""

from modelrest.api.app import app

__all__ = ["app"]
