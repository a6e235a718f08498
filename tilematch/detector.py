"""Image front end: load a board capture and find candidate tile rectangles.

Assumes the common layout of these games, light tiles on a darker
background, which Otsu thresholding separates without per-skin tuning.
"""

import logging
from pathlib import Path
from typing import List, Optional, Union

import cv2
import numpy as np
from PIL import Image

from .config import MatchConfig
from .geometry import Rect

logger = logging.getLogger(__name__)


def load_frame(image_path: Union[str, Path]) -> np.ndarray:
    """Load an image file as an RGB uint8 array."""
    pil_img = Image.open(image_path)
    if pil_img.mode == "RGBA":
        # composite on black so transparent margins read as background
        background = Image.new("RGBA", pil_img.size, (0, 0, 0, 255))
        pil_img = Image.alpha_composite(background, pil_img)
    return np.array(pil_img.convert("RGB"))


def binarize(frame: np.ndarray, config: Optional[MatchConfig] = None) -> np.ndarray:
    """Tile mask: blur away grid noise, Otsu split, dilate to close icon holes."""
    config = config or MatchConfig()
    gray = frame if frame.ndim == 2 else cv2.cvtColor(frame, cv2.COLOR_RGB2GRAY)
    k = config.blur_ksize
    blurred = cv2.GaussianBlur(gray, (k, k), 0)
    _, binary = cv2.threshold(blurred, 0, 255, cv2.THRESH_BINARY | cv2.THRESH_OTSU)
    if config.dilate_iterations > 0:
        kernel = np.ones((3, 3), dtype=np.uint8)
        binary = cv2.dilate(binary, kernel, iterations=config.dilate_iterations)
    return binary


def detect_regions(frame: np.ndarray, config: Optional[MatchConfig] = None) -> List[Rect]:
    """Bounding boxes of the outer contours of the tile mask, in contour order."""
    mask = binarize(frame, config)
    contours, _ = cv2.findContours(mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    regions = [Rect.from_xywh(cv2.boundingRect(c)) for c in contours]
    logger.debug("Found %d raw regions", len(regions))
    return regions


def analyze_image(image_path: Union[str, Path], config: Optional[MatchConfig] = None):
    """Load a capture from disk and run the full pair detection on it.

    Returns ``(frame, result)`` so callers can render the hints.
    """
    from .pipeline import detect_pairs

    frame = load_frame(image_path)
    h, w = frame.shape[:2]
    result = detect_pairs(detect_regions(frame, config), frame, w, h, config)
    return frame, result
