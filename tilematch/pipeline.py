"""Single entry point: detected regions + frame pixels -> ranked eliminable pairs.

    regions -> filter -> descriptors -> greedy pairing -> ranking

A run either completes or raises ``FrameError`` for an unusable frame; it never
leaves state behind that could affect the next run.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np

from .config import MatchConfig
from .connectivity import ConnectivityValidator
from .descriptor import Tile, build_tiles
from .detector import detect_regions
from .geometry import Rect
from .planner import MatchPlanner, PairCandidate
from .primitives import to_rgb
from .ranker import rank_pairs
from .region_filter import filter_regions
from .similarity import SimilarityScorer

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_INSUFFICIENT = "insufficient_detections"

RegionLike = Union[Rect, Tuple[int, int, int, int]]


class FrameError(ValueError):
    """The frame buffer is unusable or does not match the declared size."""


@dataclass
class MatchResult:
    """Ranked, disjoint pairs plus what the run saw along the way.

    Iterating, indexing and ``len`` apply to ``pairs``.
    """
    pairs: List[PairCandidate] = field(default_factory=list)
    status: str = STATUS_OK
    tile_count: int = 0
    tiles: List[Tile] = field(default_factory=list)
    regions: List[Rect] = field(default_factory=list)
    dropped_tile_ids: List[int] = field(default_factory=list)
    total_pairs: int = 0
    elapsed_ms: float = 0.0

    @property
    def insufficient(self) -> bool:
        return self.status == STATUS_INSUFFICIENT

    def __len__(self) -> int:
        return len(self.pairs)

    def __iter__(self) -> Iterator[PairCandidate]:
        return iter(self.pairs)

    def __getitem__(self, index):
        return self.pairs[index]

    def summary(self) -> str:
        if self.insufficient:
            return f"Insufficient detections ({self.tile_count})"
        return f"Found {self.total_pairs} pairs (showing best {len(self.pairs)})"


def check_frame(frame, frame_width: int, frame_height: int) -> np.ndarray:
    """Validate the buffer and return it as an RGB uint8 array."""
    if not isinstance(frame, np.ndarray):
        raise FrameError(f"Frame must be a numpy array, got {type(frame).__name__}")
    if frame.size == 0 or frame.ndim not in (2, 3):
        raise FrameError(f"Frame must be a non-empty 2D or 3D array, got shape {frame.shape}")
    if frame.ndim == 3 and frame.shape[2] not in (1, 3, 4):
        raise FrameError(f"Unsupported channel count: {frame.shape[2]}")
    if frame.dtype != np.uint8:
        raise FrameError(f"Frame must be uint8, got {frame.dtype}")
    h, w = frame.shape[:2]
    if (w, h) != (frame_width, frame_height):
        raise FrameError(
            f"Frame is {w}x{h} but {frame_width}x{frame_height} was declared"
        )
    return to_rgb(frame)


def _as_rects(raw_regions: Sequence[RegionLike]) -> List[Rect]:
    """Normalize detector boxes; boxes without area can never be tiles."""
    rects = []
    for region in raw_regions:
        if isinstance(region, Rect):
            rects.append(region)
            continue
        x, y, w, h = region
        if w <= 0 or h <= 0:
            logger.debug("Ignoring empty region %s", tuple(region))
            continue
        rects.append(Rect.from_xywh((x, y, w, h)))
    return rects


def detect_pairs(
    raw_regions: Sequence[RegionLike],
    frame: np.ndarray,
    frame_width: int,
    frame_height: int,
    config: Optional[MatchConfig] = None,
) -> MatchResult:
    """Propose the currently eliminable tile pairs of one board capture.

    Args:
        raw_regions: Bounding boxes from the region detector, as ``Rect`` or
            ``(x, y, w, h)`` tuples.
        frame: The captured image (RGB, RGBA or grayscale uint8).
        frame_width: Declared frame width in pixels.
        frame_height: Declared frame height in pixels.
        config: Thresholds and options; defaults to ``MatchConfig()``.

    Returns:
        A ``MatchResult`` whose pairs are disjoint and sorted by ascending
        score. Fewer than two usable tiles gives an empty result with status
        ``insufficient_detections``.

    Raises:
        FrameError: the frame is unusable or its size does not match.
    """
    config = config or MatchConfig()
    config.validate()
    start = time.perf_counter()

    rgb = check_frame(frame, frame_width, frame_height)
    regions = _as_rects(raw_regions)
    rects = filter_regions(regions, frame_width, frame_height, config)

    result = MatchResult(regions=regions, tile_count=len(rects))
    if len(rects) < 2:
        result.status = STATUS_INSUFFICIENT
        logger.info("Insufficient detections: %d tile(s) after filtering", len(rects))
        return _finish(result, start)

    tiles, dropped = build_tiles(rgb, rects, config)
    result.tiles = tiles
    result.dropped_tile_ids = dropped
    result.tile_count = len(tiles)
    if len(tiles) < 2:
        result.status = STATUS_INSUFFICIENT
        logger.info("Insufficient detections: %d describable tile(s)", len(tiles))
        return _finish(result, start)

    planner = MatchPlanner(
        SimilarityScorer(config),
        ConnectivityValidator(frame_width, frame_height, config.path_thickness),
    )
    # Undescribable tiles still sit on the board and still block paths
    pairs = planner.plan(tiles, obstacles=rects)

    result.total_pairs = len(pairs)
    result.pairs = rank_pairs(pairs, config.max_display_pairs, config.display_colors)
    _finish(result, start)
    logger.info("%s from %d tiles in %.1fms",
                result.summary(), len(tiles), result.elapsed_ms)
    return result


def _finish(result: MatchResult, start: float) -> MatchResult:
    result.elapsed_ms = (time.perf_counter() - start) * 1000
    return result


class PairDetector:
    """Runs ``detect_pairs`` repeatedly with one config.

    Only the latest run's tiles are kept; they are replaced, never mutated,
    by the next run. A run that raises leaves the previous tiles in place.
    """

    def __init__(self, config: Optional[MatchConfig] = None):
        self.config = config or MatchConfig()
        self.config.validate()
        self._last_tiles: Tuple[Tile, ...] = ()

    @property
    def last_tiles(self) -> Tuple[Tile, ...]:
        return self._last_tiles

    def run(self, raw_regions: Sequence[RegionLike], frame: np.ndarray) -> MatchResult:
        w, h = _frame_size(frame)
        result = detect_pairs(raw_regions, frame, w, h, self.config)
        self._last_tiles = tuple(result.tiles)
        return result

    def analyze(self, frame: np.ndarray) -> MatchResult:
        """Detect regions in ``frame`` with the OpenCV front end, then pair them."""
        w, h = _frame_size(frame)
        rgb = check_frame(frame, w, h)
        return self.run(detect_regions(rgb, self.config), frame)


def _frame_size(frame) -> Tuple[int, int]:
    if not isinstance(frame, np.ndarray) or frame.ndim not in (2, 3):
        raise FrameError(f"Frame must be a 2D or 3D numpy array, got {type(frame).__name__}")
    h, w = frame.shape[:2]
    return w, h
