"""Load and resolve entity metadata from YAML files."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Iterable

import yaml

from modelrest.errors import MetadataError
from modelrest.query.quoting import SQLITE, Dialect, quote

if TYPE_CHECKING:
    from modelrest.metadata.registry import SchemaRegistry


HAS_ONE = "has_one"
BELONGS_TO = "belongs_to"
HAS_MANY = "has_many"

# YAML spelling -> internal relationship kind
_RELATION_KINDS = {
    "hasOne": HAS_ONE,
    "belongsTo": BELONGS_TO,
    "hasMany": HAS_MANY,
}

SOFT_DELETE_COLUMN = "deleted_at"


@dataclass(frozen=True)
class Field:
    name: str
    db_name: str
    type: str = "string"
    primary_key: bool = False
    default: str | None = None


@dataclass(frozen=True)
class Relationship:
    """A directed edge from one schema to another.

    Attributes:
        kind: has_one, belongs_to or has_many
        name: Field name used to address the relation (e.g. "Author")
        entity: Target entity name
        foreign_key: FK column. Lives on the owner for belongs_to,
            on the target for has_one/has_many.
        references: Column the FK points at; defaults to the primary key
            of the referenced side.
    """

    kind: str
    name: str
    entity: str
    foreign_key: str
    references: str | None = None


@dataclass(frozen=True)
class Schema:
    """Immutable metadata for one registered entity."""

    name: str
    table: str
    fields: tuple[Field, ...]
    has_one: tuple[Relationship, ...] = ()
    belongs_to: tuple[Relationship, ...] = ()
    has_many: tuple[Relationship, ...] = ()
    soft_delete: str | None = None

    @property
    def relations(self) -> tuple[Relationship, ...]:
        """All relationships: has-one, belongs-to, has-many, in that order."""
        return self.has_one + self.belongs_to + self.has_many

    @property
    def primary_fields(self) -> tuple[Field, ...]:
        return tuple(f for f in self.fields if f.primary_key)

    @property
    def primary_key(self) -> str:
        """Column name of the first primary key field."""
        return self.primary_fields[0].db_name

    def field_by_column(self, column: str) -> Field | None:
        for f in self.fields:
            if f.db_name == column:
                return f
        return None

    def relation(self, name: str) -> Relationship | None:
        for relation in self.relations:
            if relation.name == name:
                return relation
        return None

    def local_key(self, relation: Relationship) -> str:
        """Column of this schema's rows that a relation is matched on."""
        if relation.kind == BELONGS_TO:
            return relation.foreign_key
        return relation.references or self.primary_key

    def join(
        self,
        registry: "SchemaRegistry",
        others: Iterable["Schema"],
        dialect: Dialect = SQLITE,
    ) -> list[str]:
        """Build join conditions linking each of ``others`` into this schema.

        Each other schema is joined to the first already-joined schema
        (this one first) that declares a relationship with it in either
        direction. Schemas with no declared relationship contribute nothing.
        """
        joined: list[Schema] = [self]
        conditions: list[str] = []
        for other in others:
            for existing in joined:
                condition = _join_condition(existing, other, registry, dialect)
                if condition is None:
                    condition = _join_condition(other, existing, registry, dialect)
                if condition is not None:
                    conditions.append(condition)
                    break
            joined.append(other)
        return conditions


def _join_condition(
    owner: Schema,
    target: Schema,
    registry: "SchemaRegistry",
    dialect: Dialect,
) -> str | None:
    """Join condition for the first relation of ``owner`` that points at ``target``."""
    for relation in owner.relations:
        related = registry.get(relation.entity)
        if related is None or related.table != target.table:
            continue
        if relation.kind == BELONGS_TO:
            left = f"{owner.table}.{relation.foreign_key}"
            right = f"{target.table}.{relation.references or target.primary_key}"
        else:
            left = f"{target.table}.{relation.foreign_key}"
            right = f"{owner.table}.{relation.references or owner.primary_key}"
        return f"{quote(left, dialect)} = {quote(right, dialect)}"
    return None


def to_snake_case(name: str) -> str:
    """Convert CamelCase/camelCase to snake_case."""
    result = []
    for i, char in enumerate(name):
        if char.isupper() and i > 0 and not name[i - 1].isupper():
            result.append("_")
        result.append(char.lower())
    return "".join(result)


class MetadataLoader:
    """Loads entity definitions from YAML files.

    Entities live in ``{metadata_path}/entities/*.yaml``. The loader is
    only used during startup; request handling reads the immutable
    SchemaRegistry built from it.
    """

    def __init__(self, metadata_path: Path):
        self.metadata_path = metadata_path
        self.entities: dict[str, Schema] = {}

    def load_all(self) -> None:
        """Load all entities and check their relations resolve."""
        self._load_entities()
        self._validate_relations()

    def _load_entities(self) -> None:
        entities_path = self.metadata_path / "entities"
        if not entities_path.exists():
            return

        for yaml_file in sorted(entities_path.glob("*.yaml")):
            with open(yaml_file) as f:
                data = yaml.safe_load(f)
                if data and "entity" in data:
                    schema = self.resolve_entity(data)
                    self.entities[schema.name] = schema

    def _validate_relations(self) -> None:
        """Every relation must target a loaded entity."""
        for schema in self.entities.values():
            for relation in schema.relations:
                if relation.entity not in self.entities:
                    raise MetadataError(
                        f"Entity '{schema.name}' relation '{relation.name}' "
                        f"targets unknown entity '{relation.entity}'"
                    )

    def resolve_entity(self, data: dict) -> Schema:
        """Convert an entity dict to a Schema."""
        name = data["entity"]
        fields = [self._resolve_field(f) for f in data.get("fields", [])]
        if not fields:
            raise MetadataError(f"Entity '{name}' declares no fields")

        columns = [f.db_name for f in fields]
        if len(set(columns)) != len(columns):
            raise MetadataError(f"Entity '{name}' declares duplicate columns")

        # Fall back to an "id" column when no field is flagged
        if not any(f.primary_key for f in fields):
            fields = [
                Field(f.name, f.db_name, f.type, f.db_name == "id", f.default)
                for f in fields
            ]
            if not any(f.primary_key for f in fields):
                raise MetadataError(f"Entity '{name}' has no primary key")

        relations: dict[str, list[Relationship]] = {
            HAS_ONE: [],
            BELONGS_TO: [],
            HAS_MANY: [],
        }
        for relation_data in data.get("relations", []):
            relation = self._resolve_relation(name, relation_data)
            relations[relation.kind].append(relation)

        soft_delete = data.get("softDelete")
        if soft_delete is None and SOFT_DELETE_COLUMN in columns:
            soft_delete = SOFT_DELETE_COLUMN
        elif soft_delete and soft_delete not in columns:
            raise MetadataError(
                f"Entity '{name}' softDelete column '{soft_delete}' is not a field"
            )

        return Schema(
            name=name,
            table=data.get("table", to_snake_case(name)),
            fields=tuple(fields),
            has_one=tuple(relations[HAS_ONE]),
            belongs_to=tuple(relations[BELONGS_TO]),
            has_many=tuple(relations[HAS_MANY]),
            soft_delete=soft_delete or None,
        )

    def _resolve_field(self, data: dict) -> Field:
        name = data["name"]
        return Field(
            name=name,
            db_name=data.get("column", to_snake_case(name)),
            type=data.get("type", "string"),
            primary_key=data.get("primaryKey", False),
            default=data.get("default"),
        )

    def _resolve_relation(self, owner: str, data: dict) -> Relationship:
        kind = _RELATION_KINDS.get(data.get("kind", ""))
        if kind is None:
            raise MetadataError(
                f"Entity '{owner}' relation '{data.get('name')}' has invalid kind "
                f"'{data.get('kind')}'. Expected one of: {', '.join(_RELATION_KINDS)}"
            )

        name = data["name"]
        if kind == BELONGS_TO:
            default_fk = f"{to_snake_case(name)}_id"
        else:
            default_fk = f"{to_snake_case(owner)}_id"

        return Relationship(
            kind=kind,
            name=name,
            entity=data["entity"],
            foreign_key=data.get("foreignKey", default_fk),
            references=data.get("references"),
        )

    def get_entity(self, name: str) -> Schema | None:
        """Get a resolved entity by name."""
        return self.entities.get(name)

    def list_entities(self) -> list[str]:
        """List all entity names."""
        return list(self.entities.keys())
