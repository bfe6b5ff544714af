"""Request parameter accessor."""

from typing import Any, Mapping
from urllib.parse import parse_qsl

from modelrest.query.builder import parse_int


class RequestParams:
    """Read-only access to the query string and path parameters of a request.

    Missing values read as ``""``; integer reads never fail and fall back
    to 0 for missing or malformed input.
    """

    def __init__(self, query_string: str = "", path_params: Mapping[str, Any] | None = None):
        self.query_string = query_string
        self._query: dict[str, str] = {}
        for key, value in parse_qsl(query_string, keep_blank_values=True):
            # First occurrence wins
            self._query.setdefault(key, value)
        self._path = {k: str(v) for k, v in (path_params or {}).items()}

    def get(self, name: str) -> str:
        return self._query.get(name, "")

    def get_int(self, name: str) -> int:
        return parse_int(self._query.get(name, ""))

    def param(self, name: str) -> str:
        """Path parameter value."""
        return self._path.get(name, "")

    def __contains__(self, name: object) -> bool:
        return name in self._query
