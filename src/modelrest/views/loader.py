"""Load list-view declarations from YAML files."""

from pathlib import Path

import yaml

from modelrest.errors import MetadataError
from modelrest.rest.processors import ProcessorRegistry
from modelrest.views.types import (
    Action,
    Filter,
    FilterView,
    FilterViewColumn,
    Join,
    Select,
)


class ViewConfigLoader:
    """Loads list views from ``metadata/views/*.yaml``, one view per entity."""

    def __init__(self, views_path: Path):
        self.views_path = views_path
        self.views: dict[str, FilterView] = {}

    def load_all(self) -> None:
        """Load all view declarations from YAML files."""
        if not self.views_path.exists():
            return

        for yaml_file in sorted(self.views_path.glob("*.yaml")):
            with open(yaml_file) as f:
                data = yaml.safe_load(f)
                if data and "view" in data:
                    view = self.parse_view(data["view"])
                    self.views[view.entity] = view

    def parse_view(self, data: dict) -> FilterView:
        """Parse a ``view:`` mapping into a FilterView."""
        return FilterView(
            entity=data["entity"],
            title=data.get("title", ""),
            description=data.get("description", ""),
            select=tuple(
                Select(select=s["select"], alias=s.get("as")) for s in data.get("select", [])
            ),
            join=tuple(
                Join(table=j["table"], condition=j.get("condition", ""))
                for j in data.get("join", [])
            ),
            condition=tuple(data.get("condition", [])),
            order=tuple(data.get("order", [])),
            url_params=tuple(self._parse_filter(f) for f in data.get("urlParams", [])),
            filters=tuple(self._parse_filter(f) for f in data.get("filters", [])),
            columns=tuple(self._parse_column(c) for c in data.get("columns", [])),
        )

    def _parse_filter(self, data: dict) -> Filter:
        return Filter(
            name=data["name"],
            filter=data["filter"],
            title=data.get("title", ""),
            type=data.get("type", ""),
            options={str(k): str(v) for k, v in (data.get("options") or {}).items()},
        )

    def _parse_column(self, data: dict) -> FilterViewColumn:
        processor = data.get("processor")
        if processor and not ProcessorRegistry.is_registered(processor):
            raise MetadataError(
                f"Column '{data.get('title', '')}' uses unregistered processor '{processor}'"
            )
        return FilterViewColumn(
            title=data.get("title", ""),
            db_field=data.get("field", ""),
            href=data.get("href", ""),
            type=data.get("type", ""),
            processor=processor,
            sort=data.get("sort", False),
            options={str(k): str(v) for k, v in (data.get("options") or {}).items()},
            actions=tuple(
                Action(
                    type=a.get("type", ""),
                    href=a.get("href", ""),
                    on_click=a.get("onClick", ""),
                    text=a.get("text", ""),
                    icon=a.get("icon", ""),
                )
                for a in data.get("actions", [])
            ),
        )

    def get_view(self, entity: str) -> FilterView | None:
        """Get the view declared for an entity."""
        return self.views.get(entity)

    def list_views(self) -> list[FilterView]:
        return list(self.views.values())
