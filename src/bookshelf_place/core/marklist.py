"""Mark a subset of indexed items (cells, nets) and renumber them densely.

A MarkList answers "has item n been marked?" in constant time and maps
each marked item to its position 0..len-1 in marking order. Clearing only
touches the marked items, so one list can be reused across many subsets.
"""

from typing import List


class MarkList:
    """Subset marker over items 0..size-1."""

    def __init__(self, size: int):
        if size < 0:
            raise ValueError("MarkList size must be non-negative")
        self.size = size
        self.marked: List[bool] = [False] * size
        self.index: List[int] = [0] * size
        self.list: List[int] = []

    def mark(self, n: int) -> int:
        """Mark item n (idempotent) and return its dense index."""
        if not self.marked[n]:
            self.marked[n] = True
            self.index[n] = len(self.list)
            self.list.append(n)
        return self.index[n]

    def is_marked(self, n: int) -> bool:
        return self.marked[n]

    def index_of(self, n: int) -> int:
        """Dense index of a marked item."""
        if not self.marked[n]:
            raise KeyError(f"item {n} is not marked")
        return self.index[n]

    def clear(self) -> None:
        for n in self.list:
            self.marked[n] = False
        self.list.clear()

    def __len__(self) -> int:
        return len(self.list)

    def __contains__(self, n: int) -> bool:
        return 0 <= n < self.size and self.marked[n]

    def __repr__(self) -> str:
        return f"MarkList({len(self.list)}/{self.size} marked)"
