"""List-view (filter view) declaration types."""

from dataclasses import dataclass, field
from typing import Any


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    """Drop empty optional values, mirroring omit-empty serialization."""
    return {k: v for k, v in data.items() if v not in (None, "", [], {})}


@dataclass(frozen=True)
class Select:
    """Extra projected expression, optionally aliased."""

    select: str
    alias: str | None = None


@dataclass(frozen=True)
class Join:
    """Additional source table with an optional explicit join condition.

    Without a condition the join is inferred from declared relationships.
    """

    table: str
    condition: str = ""


@dataclass(frozen=True)
class Filter:
    """A request-driven condition.

    ``filter`` is a SQL condition with ``?`` placeholders; every
    placeholder is bound to the parameter's value.
    """

    name: str
    filter: str
    title: str = ""
    type: str = ""
    options: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "title": self.title,
                "type": self.type,
                "options": dict(self.options),
                "name": self.name,
            }
        )


@dataclass(frozen=True)
class Action:
    """A button rendered in an action column; href/on_click are row templates."""

    type: str = ""
    href: str = ""
    on_click: str = ""
    text: str = ""
    icon: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _compact(
            {
                "type": self.type,
                "href": self.href,
                "on_click": self.on_click,
                "text": self.text,
                "icon": self.icon,
            }
        )


@dataclass(frozen=True)
class FilterViewColumn:
    """One column of a list view.

    Attributes:
        title: Column header
        db_field: Source field; ``table.column`` also adds the table as a source.
            Empty or "-" for computed/action columns.
        href: Row template; wraps the cell in a link when set
        type: Client-side rendering hint
        processor: Registered processor name computing the cell from the row
        sort: Whether the client may sort by this column
        options: Value -> label dictionary for enumerated columns
        actions: Buttons rendered instead of a value
    """

    title: str
    db_field: str = ""
    href: str = ""
    type: str = ""
    processor: str | None = None
    sort: bool = False
    options: dict[str, str] = field(default_factory=dict)
    actions: tuple[Action, ...] = ()

    @property
    def selects(self) -> bool:
        return self.db_field not in ("", "-")

    def to_dict(self) -> dict[str, Any]:
        data = _compact(
            {
                "title": self.title,
                "href": self.href,
                "list": dict(self.options),
            }
        )
        data["type"] = self.type
        data["sort"] = self.sort
        return data


@dataclass(frozen=True)
class FilterView:
    """Declarative list view over one entity."""

    entity: str
    title: str = ""
    description: str = ""
    select: tuple[Select, ...] = ()
    join: tuple[Join, ...] = ()
    condition: tuple[str, ...] = ()
    order: tuple[str, ...] = ()
    url_params: tuple[Filter, ...] = ()
    filters: tuple[Filter, ...] = ()
    columns: tuple[FilterViewColumn, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Client-facing description (no SQL)."""
        data = _compact(
            {
                "title": self.title,
                "description": self.description,
                "order": list(self.order),
                "filters": [f.to_dict() for f in self.filters],
                "columns": [c.to_dict() for c in self.columns],
            }
        )
        data["url_params"] = [p.to_dict() for p in self.url_params]
        return data
