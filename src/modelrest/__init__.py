"""modelrest — metadata-driven generic listing over relational tables."""

__version__ = "0.1.0"
