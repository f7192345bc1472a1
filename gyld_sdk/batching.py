"""Batching helpers shared by the provider clients."""

from typing import Iterator, List, Sequence, TypeVar

T = TypeVar("T")


def chunk(items: Sequence[T], size: int) -> Iterator[List[T]]:
    """Yield consecutive slices of at most ``size`` items, in order."""
    if size < 1:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])
