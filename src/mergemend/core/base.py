"""Base classes for configuration models.

Configuration sections can own resources (open log files, span
processors). BaseCloseable walks a model's fields and closes any
child that supports close(), so closing the top-level Config
releases everything it created.
"""

from __future__ import annotations

import sys
from typing import Protocol, runtime_checkable

from pydantic import BaseModel


@runtime_checkable
class Closeable(Protocol):
    """Protocol for objects that support close()."""

    def close(self) -> None:
        """Release resources."""
        ...


class BaseCloseable(BaseModel):
    """Pydantic model that closes its Closeable children.

    Works as a context manager. A child whose close() fails is
    reported on stderr and the remaining children are still closed.
    """

    def close(self):
        """Close every Closeable field value."""
        for field_name in self.__class__.model_fields:
            child = getattr(self, field_name, None)
            if child is None or not isinstance(child, Closeable):
                continue
            try:
                child.close()
            except Exception as e:
                print(
                    f"Warning: Error closing {field_name}: {e}",
                    file=sys.stderr,
                )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


class BaseConfig(BaseCloseable):
    """Marker base for configuration sections loaded from
    YAML/env/CLI."""
    pass


__all__ = ["Closeable", "BaseCloseable", "BaseConfig"]
