"""Eager loading of related rows along dotted relation paths.

Given the rows of a listing and paths such as ``["Author.Profile",
"Comments"]``, each relation level is fetched with one ``IN`` query and
the related rows are nested under the relation name:

    has_many              -> list of rows
    has_one / belongs_to  -> row or None
"""

import logging
from typing import Any, Iterable

from modelrest.metadata.loader import BELONGS_TO, HAS_MANY, Relationship, Schema
from modelrest.metadata.registry import SchemaRegistry
from modelrest.persistence.adapter import Executor
from modelrest.query.builder import Query
from modelrest.query.quoting import quote

logger = logging.getLogger(__name__)

PathTree = dict[str, "PathTree"]


def build_path_tree(paths: Iterable[str]) -> PathTree:
    """Merge dotted paths into a nested mapping.

    Example:
        build_path_tree(["Author", "Author.Profile", "Comments"])
        # {"Author": {"Profile": {}}, "Comments": {}}
    """
    tree: PathTree = {}
    for path in paths:
        node = tree
        for segment in path.split("."):
            if segment:
                node = node.setdefault(segment, {})
    return tree


def load_preloads(
    executor: Executor,
    registry: SchemaRegistry,
    schema: Schema,
    rows: list[dict[str, Any]],
    paths: Iterable[str],
) -> list[dict[str, Any]]:
    """Attach related rows to ``rows`` in place and return them."""
    tree = build_path_tree(paths)
    if rows and tree:
        _load_level(executor, registry, schema, rows, tree)
    return rows


def _keys(schema: Schema, target: Schema, relation: Relationship) -> tuple[str, str]:
    """(column on the owner rows, column on the target rows) linking a relation."""
    if relation.kind == BELONGS_TO:
        return schema.local_key(relation), relation.references or target.primary_key
    return schema.local_key(relation), relation.foreign_key


def _load_level(
    executor: Executor,
    registry: SchemaRegistry,
    schema: Schema,
    rows: list[dict[str, Any]],
    tree: PathTree,
) -> None:
    for name, subtree in tree.items():
        relation = schema.relation(name)
        target = registry.get(relation.entity) if relation else None
        if relation is None or target is None:
            logger.warning("Skipping unknown relation %r on %s", name, schema.name)
            continue

        local_key, remote_key = _keys(schema, target, relation)
        if rows and local_key not in rows[0]:
            logger.warning(
                "Rows of %s lack column %r needed to load %s", schema.name, local_key, name
            )
        values = list(dict.fromkeys(r.get(local_key) for r in rows if r.get(local_key) is not None))

        related: list[dict[str, Any]] = []
        if values:
            query = Query(registry, executor.dialect)
            query.from_(target.table)
            placeholders = ", ".join("?" for _ in values)
            query.where(
                f"{quote(f'{target.table}.{remote_key}', executor.dialect)} IN ({placeholders})",
                *values,
            )
            related = executor.fetch_all(query.render_data())
            if subtree:
                _load_level(executor, registry, target, related, subtree)

        grouped: dict[Any, list[dict[str, Any]]] = {}
        for row in related:
            grouped.setdefault(row.get(remote_key), []).append(row)

        for row in rows:
            matches = grouped.get(row.get(local_key), [])
            if relation.kind == HAS_MANY:
                row[name] = matches
            else:
                row[name] = matches[0] if matches else None
