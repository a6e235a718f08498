"""Keep the raw detections that look like game tiles and put them in reading order.

Icons on these boards are near-square and occupy a small, bounded share of the
frame, so area and aspect ratio alone reject most detector noise.
"""

import logging
from typing import List, Sequence

from .config import MatchConfig
from .geometry import Rect

logger = logging.getLogger(__name__)


def is_tile_like(rect: Rect, frame_area: float, config: MatchConfig) -> bool:
    area = rect.area
    if not config.min_area_frac * frame_area < area < config.max_area_frac * frame_area:
        return False
    return config.aspect_min < rect.aspect < config.aspect_max


def sort_reading_order(rects: Sequence[Rect], row_bucket_frac: float = 0.5) -> List[Rect]:
    """Order rectangles row by row, left to right.

    A rectangle joins the current row while its top edge is within
    ``row_bucket_frac`` of the row anchor's height; ties keep detector order.
    """
    by_top = sorted(enumerate(rects), key=lambda item: item[1].y)

    rows = {}
    row = -1
    anchor = None
    for idx, rect in by_top:
        if anchor is None or abs(rect.y - anchor.y) > row_bucket_frac * anchor.height:
            row += 1
            anchor = rect
        rows[idx] = row

    order = sorted(range(len(rects)), key=lambda i: (rows[i], rects[i].x))
    return [rects[i] for i in order]


def filter_regions(
    regions: Sequence[Rect],
    frame_width: int,
    frame_height: int,
    config: MatchConfig,
) -> List[Rect]:
    """Drop rectangles outside the tile area/aspect window and sort the rest.

    Returns the kept rectangles in reading order; the position in this list
    becomes the tile id.
    """
    frame_area = float(frame_width * frame_height)
    kept = [r for r in regions if is_tile_like(r, frame_area, config)]
    logger.debug(
        "Region filter kept %d of %d candidates (area %.0f-%.0f px)",
        len(kept), len(regions),
        config.min_area_frac * frame_area, config.max_area_frac * frame_area,
    )
    return sort_reading_order(kept, config.row_bucket_frac)
