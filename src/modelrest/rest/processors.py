"""Value processors for computed list-view columns.

A processor receives the full result row and returns the cell text.
Processors are referenced by name from view metadata and must be
registered before views are loaded.

Usage:
    from modelrest.rest.processors import processor

    @processor("fullName")
    def full_name(row: dict) -> str:
        return f"{row['first_name']} {row['last_name']}"
"""

from collections.abc import Callable
from typing import Any

# Processor signature: (row) -> cell text
ProcessorFn = Callable[[dict[str, Any]], str]


class ProcessorRegistry:
    """Registry of named value processors."""

    _processors: dict[str, ProcessorFn] = {}

    @classmethod
    def register(cls, name: str, fn: ProcessorFn) -> None:
        """Register a processor by name. Re-registering a name replaces it."""
        cls._processors[name] = fn

    @classmethod
    def get(cls, name: str) -> ProcessorFn:
        """Get a registered processor.

        Raises:
            ValueError: If no processor is registered under ``name``
        """
        if name not in cls._processors:
            raise ValueError(
                f"Processor '{name}' is not registered. "
                "Processors must be registered before views are loaded."
            )
        return cls._processors[name]

    @classmethod
    def is_registered(cls, name: str) -> bool:
        return name in cls._processors

    @classmethod
    def list_registered(cls) -> list[str]:
        return sorted(cls._processors.keys())

    @classmethod
    def clear(cls) -> None:
        """Clear all registrations. Primarily for testing."""
        cls._processors.clear()


def processor(name: str) -> Callable[[ProcessorFn], ProcessorFn]:
    """Decorator to register a value processor."""

    def decorator(fn: ProcessorFn) -> ProcessorFn:
        ProcessorRegistry.register(name, fn)
        return fn

    return decorator
