"""Patch comparison primitives backed by OpenCV.

Output ranges the rest of the package relies on:
  - ``resize_patch``: uint8 array of shape (size, size, 3)
  - ``count_differing_pixels``: integer in [0, h * w]
  - ``compute_hs_histogram``: float32 array of shape ``bins``, values in [0, 1]
  - ``compare_histograms``: correlation in [-1, 1], 1 for identical inputs
"""

from typing import Tuple

import cv2
import numpy as np


def to_rgb(img: np.ndarray) -> np.ndarray:
    """Return a 3-channel RGB view of a grayscale, RGB or RGBA image."""
    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGB)
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_RGBA2RGB)
    if img.shape[2] == 1:
        return cv2.cvtColor(img[:, :, 0], cv2.COLOR_GRAY2RGB)
    return img


def resize_patch(patch: np.ndarray, size: int) -> np.ndarray:
    """Resize an RGB patch to ``size`` x ``size``."""
    interpolation = cv2.INTER_AREA if min(patch.shape[:2]) > size else cv2.INTER_LINEAR
    return cv2.resize(patch, (size, size), interpolation=interpolation)


def count_differing_pixels(a: np.ndarray, b: np.ndarray, threshold: int) -> int:
    """Count pixels whose absolute difference, collapsed to intensity, exceeds ``threshold``."""
    diff = cv2.absdiff(a, b)
    if diff.ndim == 3:
        diff = cv2.cvtColor(diff, cv2.COLOR_RGB2GRAY)
    _, binary = cv2.threshold(diff, threshold, 255, cv2.THRESH_BINARY)
    return int(cv2.countNonZero(binary))


def compute_hs_histogram(patch: np.ndarray, bins: Tuple[int, int]) -> np.ndarray:
    """Hue/saturation histogram of an RGB patch, min-max normalized to [0, 1]."""
    hsv = cv2.cvtColor(patch, cv2.COLOR_RGB2HSV)
    hist = cv2.calcHist([hsv], [0, 1], None, list(bins), [0, 180, 0, 256])
    cv2.normalize(hist, hist, 0, 1, cv2.NORM_MINMAX)
    return hist


def compare_histograms(a: np.ndarray, b: np.ndarray) -> float:
    """Correlation coefficient between two histograms."""
    return float(cv2.compareHist(a, b, cv2.HISTCMP_CORREL))
