"""JSON Schema validation of metadata YAML files.

Each metadata directory holds one kind of document:

    entities/*.yaml  -> entity.schema.json
    views/*.yaml     -> view.schema.json

Schemas live in ``schemas/`` and share definitions through
``_defs.schema.json``, resolved by ``$id``.
"""

import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from referencing import Registry
from referencing.jsonschema import DRAFT202012

logger = logging.getLogger(__name__)

SCHEMAS_DIR = Path(__file__).parent / "schemas"


@dataclass(frozen=True)
class MetadataKind:
    directory: str
    schema: str


KINDS = (
    MetadataKind("entities", "entity.schema.json"),
    MetadataKind("views", "view.schema.json"),
)


def kind_for_path(path: Path) -> MetadataKind | None:
    """The kind of a metadata file, from the directory holding it."""
    for kind in KINDS:
        if path.parent.name == kind.directory:
            return kind
    return None


@dataclass
class ValidationIssue:
    """One finding for a metadata file.

    ``path`` locates the offending node inside the document, with list
    indexes as segments (``relations/0/kind``).
    """

    file: Path
    message: str
    path: str = ""
    severity: str = "error"

    def __str__(self) -> str:
        where = f" at {self.path}" if self.path else ""
        return f"[{self.severity.upper()}] {self.file}{where}: {self.message}"


@lru_cache(maxsize=1)
def _schema_store() -> tuple[Registry, dict[str, dict[str, Any]]]:
    schemas = {
        path.name: json.loads(path.read_text()) for path in sorted(SCHEMAS_DIR.glob("*.schema.json"))
    }
    registry = Registry().with_resources(
        (schema["$id"], DRAFT202012.create_resource(schema)) for schema in schemas.values()
    )
    return registry, schemas


def validate_document(doc: Any, schema_name: str, file: Path) -> list[ValidationIssue]:
    """Validate an already-parsed document against a named schema."""
    registry, schemas = _schema_store()
    validator = Draft202012Validator(schemas[schema_name], registry=registry)
    errors = sorted(validator.iter_errors(doc), key=lambda e: [str(p) for p in e.absolute_path])
    return [
        ValidationIssue(
            file=file,
            message=error.message,
            path="/".join(str(p) for p in error.absolute_path),
        )
        for error in errors
    ]


def validate_yaml_file(yaml_path: Path, schema_name: str) -> list[ValidationIssue]:
    """Parse and validate one YAML file; an empty list means it is valid."""
    try:
        doc = yaml.safe_load(yaml_path.read_text())
    except yaml.YAMLError as exc:
        return [ValidationIssue(file=yaml_path, message=f"YAML parse error: {exc}")]
    if doc is None:
        return [ValidationIssue(file=yaml_path, message="File is empty")]
    return validate_document(doc, schema_name, yaml_path)


def validate_metadata_dir(metadata_dir: Path, *, strict: bool = False) -> list[ValidationIssue]:
    """Validate every metadata file under ``metadata_dir``.

    ``.yml`` files are reported as warnings since the loaders only read
    ``.yaml``; ``strict`` turns warnings into errors.
    """
    if not metadata_dir.is_dir():
        return [
            ValidationIssue(
                file=metadata_dir,
                message=f"Metadata directory does not exist: {metadata_dir}",
            )
        ]

    issues: list[ValidationIssue] = []
    for kind in KINDS:
        directory = metadata_dir / kind.directory
        if not directory.is_dir():
            continue
        for yaml_file in sorted(directory.glob("*.yaml")):
            issues.extend(validate_yaml_file(yaml_file, kind.schema))
        for ignored in sorted(directory.glob("*.yml")):
            issues.append(
                ValidationIssue(
                    file=ignored,
                    message="Not loaded: metadata files must use the .yaml extension",
                    severity="error" if strict else "warning",
                )
            )
    return issues


def log_issues(issues: list[ValidationIssue]) -> None:
    """Report validation issues through logging without failing startup."""
    errors = 0
    for issue in issues:
        if issue.severity == "error":
            errors += 1
            logger.error("Metadata schema error: %s", issue)
        else:
            logger.warning("Metadata schema warning: %s", issue)
    if issues:
        logger.warning(
            "Metadata validation found %d error(s) and %d warning(s); "
            "run 'modelrest metadata validate' for details",
            errors,
            len(issues) - errors,
        )
