"""Relation graph traversal for preload paths.

Relationship graphs are general directed graphs: self references and
circular foreign keys are valid. The walk threads the chain of tables on
the current path (not a global visited set, since one entity may appear
on several independent branches) and stops on immediate back-edges and
past a fixed depth.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from modelrest.metadata.loader import Schema
    from modelrest.metadata.registry import SchemaRegistry

logger = logging.getLogger(__name__)

MAX_CHAIN = 4


def walk_associations(
    prefix: str,
    schema: "Schema",
    registry: "SchemaRegistry",
    chain: list[str] | None = None,
) -> list[str]:
    """Return dotted preload paths reachable from ``schema``.

    Args:
        prefix: Path of ``schema`` relative to the root ("" for the root)
        schema: Schema whose relations are expanded
        registry: Resolves relation targets
        chain: Tables on the current path, root first, ending with
            ``schema.table``. Omit for the root call.

    Example:
        walk_associations("", post_schema, registry)
        # ["Author", "Author.Profile", "Comments"]
    """
    if chain is None:
        chain = [schema.table]
    if len(chain) > MAX_CHAIN:
        return []

    root_table = chain[0]
    nested = len(chain) > 1
    paths: list[str] = []

    for relation in schema.relations:
        target = registry.get(relation.entity)
        if target is None:
            logger.warning(
                "Relation %s.%s targets unregistered entity %s",
                schema.name, relation.name, relation.entity,
            )
            continue

        # Relations leading back to the root are only followed from the root itself
        if nested and target.table == root_table:
            continue
        # A -> B -> A ping-pong
        if len(chain) > 1 and chain[-2] == target.table:
            continue

        path = f"{prefix}.{relation.name}".lstrip(".")
        paths.append(path)

        if target.table == root_table:
            continue
        paths.extend(walk_associations(path, target, registry, chain + [target.table]))

    return paths


def normalize_relation_path(joins: str) -> str:
    """Normalize a user-supplied relation path list.

    Each dot-separated segment gets its first letter upper-cased
    (``author.profile`` -> ``Author.Profile``). Only the first non-empty
    path of a comma-separated list is returned.
    """
    for relation in joins.split(","):
        segments = [s[:1].upper() + s[1:] for s in relation.strip().split(".")]
        path = ".".join(segments)
        if path.strip("."):
            return path
    return ""
