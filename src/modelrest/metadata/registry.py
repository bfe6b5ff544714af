"""Process-wide registry of entity schemas.

The registry is built once at startup and never mutated afterwards, so
concurrent requests read it without locking. Hot reload builds a new
registry with ``replace()`` and swaps the reference as a whole.
"""

from types import MappingProxyType
from typing import Iterable, Iterator

from modelrest.metadata.loader import MetadataLoader, Schema


class SchemaRegistry:
    """Read-only lookup of schemas by entity name and by table name."""

    def __init__(self, schemas: Iterable[Schema] = ()):
        by_name = {}
        by_table = {}
        for schema in schemas:
            by_name[schema.name] = schema
            by_table[schema.table] = schema
        self._by_name = MappingProxyType(by_name)
        self._by_table = MappingProxyType(by_table)

    @classmethod
    def from_loader(cls, loader: MetadataLoader) -> "SchemaRegistry":
        return cls(loader.entities.values())

    def replace(self, schemas: Iterable[Schema]) -> "SchemaRegistry":
        """Return a new registry holding ``schemas``; this one is unchanged."""
        return SchemaRegistry(schemas)

    def get(self, name: str) -> Schema | None:
        """Get a schema by entity name."""
        return self._by_name.get(name)

    def find(self, table: str) -> Schema | None:
        """Get a schema by table name."""
        return self._by_table.get(table)

    def names(self) -> list[str]:
        return list(self._by_name.keys())

    def __iter__(self) -> Iterator[Schema]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name
