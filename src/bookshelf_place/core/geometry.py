"""Axis-aligned bounding boxes."""

from dataclasses import dataclass
import math


@dataclass
class BBox:
    """Axis-aligned bounding box.

    A freshly created box is empty (inverted infinite bounds) and grows as
    points or other boxes are added.
    """
    llx: float = math.inf
    lly: float = math.inf
    urx: float = -math.inf
    ury: float = -math.inf

    @classmethod
    def from_corners(cls, llx: float, lly: float, urx: float, ury: float) -> "BBox":
        box = cls()
        box.add_point(llx, lly)
        box.add_point(urx, ury)
        return box

    def is_empty(self) -> bool:
        return self.llx > self.urx or self.lly > self.ury

    def add_point(self, x: float, y: float) -> None:
        """Grow the box to include (x, y)."""
        self.llx = min(self.llx, x)
        self.lly = min(self.lly, y)
        self.urx = max(self.urx, x)
        self.ury = max(self.ury, y)

    def expand(self, other: "BBox") -> None:
        """Grow the box to include another box."""
        if other.is_empty():
            return
        self.add_point(other.llx, other.lly)
        self.add_point(other.urx, other.ury)

    def dx(self) -> float:
        return 0.0 if self.is_empty() else self.urx - self.llx

    def dy(self) -> float:
        return 0.0 if self.is_empty() else self.ury - self.lly

    def area(self) -> float:
        return self.dx() * self.dy()

    def overlaps(self, other: "BBox") -> bool:
        """Check for overlap with positive area (touching edges do not count)."""
        if self.is_empty() or other.is_empty():
            return False
        return (self.llx < other.urx and other.llx < self.urx
                and self.lly < other.ury and other.lly < self.ury)

    def __repr__(self) -> str:
        return f"BBox(({self.llx}, {self.lly}) to ({self.urx}, {self.ury}))"
