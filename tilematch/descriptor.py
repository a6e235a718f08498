"""Per-tile descriptors: a small structural patch plus a hue/saturation histogram.

The tile is cropped inward before anything is measured; many boards draw an
identical rim or button bezel around every icon, and leaving it in makes
unrelated tiles look alike.
"""

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from .config import MatchConfig
from .geometry import Point, Rect
from .primitives import compute_hs_histogram, resize_patch

logger = logging.getLogger(__name__)


class DescriptorExtractionError(ValueError):
    """The tile rectangle leaves no pixels once cropped and clipped."""


@dataclass(frozen=True, eq=False)
class Descriptor:
    structural: np.ndarray       # (patch_size, patch_size, 3) uint8 RGB
    color_histogram: np.ndarray  # hue x saturation, float32 in [0, 1]


@dataclass(frozen=True, eq=False)
class Tile:
    id: int
    rect: Rect
    center: Point
    descriptor: Descriptor

    @property
    def area(self) -> int:
        return self.rect.area


def crop_bounds(rect: Rect, frame_width: int, frame_height: int,
                config: MatchConfig) -> Tuple[int, int, int, int]:
    """Inner (x0, y0, x1, y1) of a tile after the bezel margin, clipped to the frame."""
    if config.crop_margin_px is not None:
        margin_x = margin_y = config.crop_margin_px
    else:
        margin_x = int(rect.width * config.crop_margin_frac)
        margin_y = int(rect.height * config.crop_margin_frac)

    x0 = max(0, rect.x + margin_x)
    y0 = max(0, rect.y + margin_y)
    x1 = min(frame_width, rect.right - margin_x)
    y1 = min(frame_height, rect.bottom - margin_y)
    if x1 <= x0 or y1 <= y0:
        raise DescriptorExtractionError(
            f"Tile {rect.as_xywh()} is empty after a {margin_x}x{margin_y}px margin"
        )
    return x0, y0, x1, y1


def extract_descriptor(frame: np.ndarray, rect: Rect, config: MatchConfig) -> Descriptor:
    """Build the descriptor of one tile from an RGB frame."""
    h, w = frame.shape[:2]
    x0, y0, x1, y1 = crop_bounds(rect, w, h, config)
    patch = resize_patch(frame[y0:y1, x0:x1], config.patch_size)
    hist = compute_hs_histogram(patch, config.hist_bins)
    return Descriptor(structural=patch, color_histogram=hist)


def build_tiles(
    frame: np.ndarray,
    rects: Sequence[Rect],
    config: MatchConfig,
) -> Tuple[List[Tile], List[int]]:
    """Describe every rectangle; rectangle ``i`` becomes tile id ``i``.

    Tiles whose descriptor cannot be computed are left out. Returns the tiles
    and the ids that were dropped.
    """
    def describe(rect: Rect) -> Descriptor:
        return extract_descriptor(frame, rect, config)

    if config.workers > 1 and len(rects) > 1:
        with concurrent.futures.ThreadPoolExecutor(max_workers=config.workers) as executor:
            futures = [executor.submit(describe, rect) for rect in rects]
            outcomes = [_outcome(f) for f in futures]
    else:
        outcomes = []
        for rect in rects:
            try:
                outcomes.append(describe(rect))
            except DescriptorExtractionError as e:
                outcomes.append(e)

    tiles: List[Tile] = []
    dropped: List[int] = []
    for tile_id, (rect, outcome) in enumerate(zip(rects, outcomes)):
        if isinstance(outcome, DescriptorExtractionError):
            logger.warning("Dropping tile %d: %s", tile_id, outcome)
            dropped.append(tile_id)
            continue
        tiles.append(Tile(id=tile_id, rect=rect, center=rect.center, descriptor=outcome))
    return tiles, dropped


def _outcome(future: concurrent.futures.Future):
    error = future.exception()
    if isinstance(error, DescriptorExtractionError):
        return error
    if error is not None:
        raise error
    return future.result()
