"""Row templates for list-view links and action buttons.

Templates use Jinja2 syntax with the row's columns as variables::

    /admin/posts/{{ pk }}/edit
"""

import logging
from functools import lru_cache
from typing import Any, Mapping

from jinja2 import Template, TemplateError
from jinja2.sandbox import SandboxedEnvironment

logger = logging.getLogger(__name__)

_env = SandboxedEnvironment(autoescape=False)


@lru_cache(maxsize=256)
def _compile(source: str) -> Template:
    return _env.from_string(source)


def render_template(source: str, row: Mapping[str, Any]) -> str:
    """Render ``source`` against ``row``; a failing template renders as ""."""
    if not source:
        return ""
    try:
        return _compile(source).render(**{str(k): v for k, v in row.items()})
    except (TemplateError, TypeError, ValueError) as exc:
        logger.warning("Template %r failed to render: %s", source, exc)
        return ""
