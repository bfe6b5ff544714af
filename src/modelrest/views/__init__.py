"""List-view declarations and their YAML loader."""

from modelrest.views.types import (
    Action,
    Filter,
    FilterView,
    FilterViewColumn,
    Join,
    Select,
)
from modelrest.views.loader import ViewConfigLoader

__all__ = [
    "Action",
    "Filter",
    "FilterView",
    "FilterViewColumn",
    "Join",
    "Select",
    "ViewConfigLoader",
]
