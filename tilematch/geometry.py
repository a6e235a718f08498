"""Axis-aligned geometry shared by the filter, the validator and the renderer."""

from dataclasses import dataclass
from typing import Iterable, Tuple


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """Integer pixel rectangle as produced by region detection."""
    x: int
    y: int
    width: int
    height: int

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Rect needs a positive size, got {self.width}x{self.height}")

    @classmethod
    def from_xywh(cls, box: Tuple[int, int, int, int]) -> "Rect":
        x, y, w, h = box
        return cls(int(x), int(y), int(w), int(h))

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def aspect(self) -> float:
        return self.width / self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2.0, self.y + self.height / 2.0)

    def as_xywh(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.width, self.height)


def overlap_extent(a0: float, a1: float, b0: float, b1: float) -> float:
    """Length shared by the intervals [a0, a1] and [b0, b1] (negative if apart)."""
    return min(a1, b1) - max(a0, b0)


def box_overlaps_rect(box: Tuple[float, float, float, float], rect: Rect) -> bool:
    """Strict overlap of a (left, top, right, bottom) box with a rect.

    Edges that merely touch share zero extent and do not count.
    """
    left, top, right, bottom = box
    return (
        overlap_extent(left, right, rect.x, rect.right) > 0
        and overlap_extent(top, bottom, rect.y, rect.bottom) > 0
    )


@dataclass(frozen=True)
class Segment:
    """A straight path piece between two points.

    Segments built by the connectivity check are horizontal or vertical; a
    direct link between two nearly aligned centres may be slightly skewed and
    its band then spans both endpoints on the cross axis.
    """
    start: Point
    end: Point

    @property
    def is_horizontal(self) -> bool:
        return abs(self.end.x - self.start.x) >= abs(self.end.y - self.start.y)

    def band(self, thickness: float) -> Tuple[float, float, float, float]:
        """The segment inflated to width ``thickness``, as (left, top, right, bottom)."""
        half = thickness / 2.0
        left, right = sorted((self.start.x, self.end.x))
        top, bottom = sorted((self.start.y, self.end.y))
        if self.is_horizontal:
            return (left, top - half, right, bottom + half)
        return (left - half, top, right + half, bottom)

    def hits_any(self, obstacles: Iterable[Rect], thickness: float) -> bool:
        box = self.band(thickness)
        return any(box_overlaps_rect(box, rect) for rect in obstacles)
