"""Path resolution shared by CLI commands."""

import os
from pathlib import Path


def resolve_metadata_path() -> Path:
    """MODELREST_METADATA_PATH, else ``./metadata``."""
    configured = os.environ.get("MODELREST_METADATA_PATH")
    if configured:
        return Path(configured)
    return Path.cwd() / "metadata"
