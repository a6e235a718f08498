"""Orthogonal reachability between two tiles with at most two turns.

A path is a chain of axis-aligned segments between the two tile centres. Each
segment is inflated to a band of width ``thickness``; the path is legal when no
band overlaps another tile with positive area.

Two-turn paths are not searched on a grid. Only a bounded set of "bridge"
lines is tried: the frame edges, the two centre coordinates, and a line just
outside each obstacle edge.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from .geometry import Point, Rect, Segment, box_overlaps_rect

logger = logging.getLogger(__name__)

Path = List[Segment]


def default_thickness(rect_a: Rect, rect_b: Rect) -> float:
    """Half of the smallest tile dimension of the pair."""
    return 0.5 * min(rect_a.width, rect_a.height, rect_b.width, rect_b.height)


# ---- Band tests ----

def horizontal_clear(y: float, x0: float, x1: float, half: float,
                     obstacles: Iterable[Rect]) -> bool:
    left, right = min(x0, x1), max(x0, x1)
    band = (left, y - half, right, y + half)
    return not any(box_overlaps_rect(band, r) for r in obstacles)


def vertical_clear(x: float, y0: float, y1: float, half: float,
                   obstacles: Iterable[Rect]) -> bool:
    top, bottom = min(y0, y1), max(y0, y1)
    band = (x - half, top, x + half, bottom)
    return not any(box_overlaps_rect(band, r) for r in obstacles)


def segment_clear(segment: Segment, thickness: float, obstacles: Sequence[Rect]) -> bool:
    """Test one segment; axis-aligned segments use the specialized band tests."""
    p, q = segment.start, segment.end
    half = thickness / 2.0
    if p.y == q.y:
        return horizontal_clear(p.y, p.x, q.x, half, obstacles)
    if p.x == q.x:
        return vertical_clear(p.x, p.y, q.y, half, obstacles)
    return not segment.hits_any(obstacles, thickness)


def path_clear(path: Path, thickness: float, obstacles: Sequence[Rect]) -> bool:
    return all(segment_clear(s, thickness, obstacles) for s in path)


# ---- Candidate paths ----

def _polyline(*points: Point) -> Path:
    return [Segment(a, b) for a, b in zip(points, points[1:])]


def direct_path(ca: Point, cb: Point, thickness: float) -> Optional[Path]:
    """The single straight segment, when the centres are aligned within ``thickness``."""
    if abs(ca.x - cb.x) <= thickness or abs(ca.y - cb.y) <= thickness:
        return [Segment(ca, cb)]
    return None


def one_turn_paths(ca: Point, cb: Point) -> List[Path]:
    return [
        _polyline(ca, Point(ca.x, cb.y), cb),
        _polyline(ca, Point(cb.x, ca.y), cb),
    ]


def bridge_coordinates(ca: float, cb: float, frame_extent: float,
                       edges: Iterable[tuple], thickness: float) -> List[float]:
    """Candidate bridge lines along one axis, shortest detour first.

    ``edges`` are (near, far) obstacle edge pairs on that axis.
    """
    candidates = [0.0, float(frame_extent), ca, cb]
    for near, far in edges:
        candidates.append(near - thickness)
        candidates.append(far + thickness)
    unique = list(dict.fromkeys(candidates))
    return sorted(unique, key=lambda c: abs(c - ca) + abs(c - cb))


def two_turn_paths(ca: Point, cb: Point, obstacles: Sequence[Rect], thickness: float,
                   frame_width: float, frame_height: float) -> Iterable[Path]:
    """Three-segment paths through vertical bridges, then horizontal bridges."""
    xs = bridge_coordinates(ca.x, cb.x, frame_width,
                            ((r.x, r.right) for r in obstacles), thickness)
    for x in xs:
        yield _polyline(ca, Point(x, ca.y), Point(x, cb.y), cb)

    ys = bridge_coordinates(ca.y, cb.y, frame_height,
                            ((r.y, r.bottom) for r in obstacles), thickness)
    for y in ys:
        yield _polyline(ca, Point(ca.x, y), Point(cb.x, y), cb)


class ConnectivityValidator:
    """Finds a legal path between two tiles among the other tiles on the board."""

    def __init__(self, frame_width: int, frame_height: int,
                 thickness: Optional[float] = None):
        self.frame_width = frame_width
        self.frame_height = frame_height
        self.thickness = thickness

    def thickness_for(self, rect_a: Rect, rect_b: Rect) -> float:
        if self.thickness is not None:
            return float(self.thickness)
        return default_thickness(rect_a, rect_b)

    def find_path(self, rect_a: Rect, rect_b: Rect,
                  obstacles: Sequence[Rect]) -> Optional[Path]:
        """Return the first legal path of at most three segments, or None.

        ``obstacles`` must not contain ``rect_a`` or ``rect_b``.
        """
        ca, cb = rect_a.center, rect_b.center
        thickness = self.thickness_for(rect_a, rect_b)

        path = direct_path(ca, cb, thickness)
        if path is not None and path_clear(path, thickness, obstacles):
            return path

        for path in one_turn_paths(ca, cb):
            if path_clear(path, thickness, obstacles):
                return path

        for path in two_turn_paths(ca, cb, obstacles, thickness,
                                   self.frame_width, self.frame_height):
            if path_clear(path, thickness, obstacles):
                return path

        logger.debug("No path between %s and %s", rect_a.as_xywh(), rect_b.as_xywh())
        return None

    def is_connected(self, rect_a: Rect, rect_b: Rect, obstacles: Sequence[Rect]) -> bool:
        return self.find_path(rect_a, rect_b, obstacles) is not None
