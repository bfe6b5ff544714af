"""Executor Protocol — shared interface for all data-store adapters."""

from typing import Any, Protocol, runtime_checkable

from modelrest.metadata.loader import Schema
from modelrest.query.builder import Statement
from modelrest.query.quoting import Dialect


@runtime_checkable
class Executor(Protocol):
    """Interface the request handlers run rendered statements through.

    Statements carry ``?`` placeholders; adapters for stores with another
    parameter style translate them before executing.
    """

    # Quoting and paging rules the query builder renders for
    dialect: Dialect

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def initialize_entity(self, schema: Schema) -> None: ...

    def insert(self, schema: Schema, data: dict[str, Any]) -> None: ...

    def fetch_all(self, statement: Statement) -> list[dict[str, Any]]: ...

    def fetch_count(self, statement: Statement) -> int: ...
