"""Unwrapping of the provider's list-shaped responses."""

from __future__ import annotations

from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


def first_result(items: Sequence[T]) -> Optional[T]:
    """First element, or ``None`` for an empty list."""
    return items[0] if len(items) > 0 else None
