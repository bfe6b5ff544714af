"""Field type registry with storage types and runtime value types."""

from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class FieldType:
    """A declared field type.

    Attributes:
        name: Type name used in entity metadata (``type: integer``)
        storage_type: Column type used when creating tables
        value_type: Factory for the runtime value of a field of this type.
            Custom types may return objects implementing ``rest_filter``
            to take over filtering of their column.
    """

    name: str
    storage_type: str
    value_type: Callable[[], Any] = str


# Built-in field types
FIELD_TYPES: dict[str, FieldType] = {
    "string": FieldType(name="string", storage_type="TEXT", value_type=str),
    "text": FieldType(name="text", storage_type="TEXT", value_type=str),
    "email": FieldType(name="email", storage_type="TEXT", value_type=str),
    "uuid": FieldType(name="uuid", storage_type="TEXT", value_type=str),
    "integer": FieldType(name="integer", storage_type="INTEGER", value_type=int),
    "number": FieldType(name="number", storage_type="REAL", value_type=float),
    "boolean": FieldType(name="boolean", storage_type="INTEGER", value_type=bool),
    "date": FieldType(name="date", storage_type="TEXT", value_type=str),  # ISO format
    "datetime": FieldType(name="datetime", storage_type="TEXT", value_type=str),  # ISO format
}


def register_field_type(field_type: FieldType) -> None:
    """Register (or override) a field type by name.

    Called at application startup, before metadata is loaded.
    """
    FIELD_TYPES[field_type.name] = field_type


def get_field_type(type_name: str) -> FieldType:
    """Get field type definition, defaulting to string if unknown."""
    return FIELD_TYPES.get(type_name, FIELD_TYPES["string"])


def get_storage_type(type_name: str) -> str:
    """Get the storage type for a field type."""
    return get_field_type(type_name).storage_type


def field_value(type_name: str) -> Any:
    """Return a fresh runtime value for a field type (its zero value)."""
    return get_field_type(type_name).value_type()
