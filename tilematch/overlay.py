"""Hint overlay: draws the ranked pairs over the board capture.

  - every raw detection as a thin grey box
  - each displayed pair in its rank colour: both boxes, a connecting line
    and a dot on each centre
  - a status bar with the run summary
"""

import logging
from pathlib import Path

import cv2
import numpy as np
from PIL import Image

from .config import RAW_REGION_COLOR
from .pipeline import MatchResult
from .primitives import to_rgb

logger = logging.getLogger(__name__)

BAR_HEIGHT = 28


def _pt(point) -> tuple:
    return (int(round(point.x)), int(round(point.y)))


def render_hints(
    frame: np.ndarray,
    result: MatchResult,
    show_raw_regions: bool = True,
    status_bar: bool = True,
) -> np.ndarray:
    """Return an RGB copy of ``frame`` with the hints drawn on it."""
    canvas = to_rgb(frame).copy()

    if show_raw_regions:
        for rect in result.regions:
            cv2.rectangle(canvas, (rect.x, rect.y), (rect.right, rect.bottom),
                          RAW_REGION_COLOR, 1)

    for pair in result.pairs:
        color = tuple(int(c) for c in (pair.color or RAW_REGION_COLOR))
        for tile in (pair.a, pair.b):
            r = tile.rect
            cv2.rectangle(canvas, (r.x, r.y), (r.right, r.bottom), color, 3)
        cv2.line(canvas, _pt(pair.a.center), _pt(pair.b.center), color, 2)
        cv2.circle(canvas, _pt(pair.a.center), 5, color, -1)
        cv2.circle(canvas, _pt(pair.b.center), 5, color, -1)

    if not status_bar:
        return canvas

    bar = np.full((BAR_HEIGHT, canvas.shape[1], 3), 30, dtype=np.uint8)
    text = result.summary()
    if result.dropped_tile_ids:
        text += f"  |  dropped tiles: {len(result.dropped_tile_ids)}"
    cv2.putText(bar, text, (8, 19), cv2.FONT_HERSHEY_SIMPLEX, 0.5,
                (220, 220, 220), 1, cv2.LINE_AA)
    return np.vstack([canvas, bar])


def save_overlay(
    frame: np.ndarray,
    result: MatchResult,
    output_path: Path,
    show_raw_regions: bool = True,
    status_bar: bool = True,
) -> Path:
    """Render the hints and write them as an image file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    panel = render_hints(frame, result, show_raw_regions=show_raw_regions,
                         status_bar=status_bar)
    Image.fromarray(panel).save(output_path)
    logger.info("Hint overlay saved: %s", output_path)
    return output_path
