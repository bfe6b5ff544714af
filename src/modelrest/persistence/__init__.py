"""Persistence layer - data-store executors and relation preloading."""

from modelrest.persistence.adapter import Executor
from modelrest.persistence.config import DatabaseConfig, create_adapter
from modelrest.persistence.preload import load_preloads

__all__ = ["Executor", "DatabaseConfig", "create_adapter", "load_preloads"]
