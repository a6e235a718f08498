"""Pairwise tile similarity: zonal structure, colour histogram and size gates.

Each signal catches its own failure mode. The histogram notices global hue
swaps, the zonal score notices a localized shape difference that a histogram
blurs away, and the size ratio notices segmentation artefacts. A pair must
clear every gate before its composite score is used for ranking, so one
strong signal never buys back a disqualifying weak one.
"""

from dataclasses import dataclass
from typing import List

import numpy as np

from .config import MatchConfig
from .descriptor import Descriptor, Tile
from .primitives import compare_histograms, count_differing_pixels


@dataclass
class Similarity:
    """Comparison of two tiles. ``score`` is lower for more similar tiles."""
    zonal_diff: float
    hist_correlation: float
    size_ratio: float
    score: float
    accepted: bool


def quadrant_scores(a: np.ndarray, b: np.ndarray, pixel_threshold: int,
                    scale: float) -> List[float]:
    """Mismatch of each quadrant (TL, TR, BL, BR) on a 0..``scale`` range."""
    h, w = a.shape[:2]
    mid_y, mid_x = h // 2, w // 2
    scores = []
    for ys in (slice(0, mid_y), slice(mid_y, h)):
        for xs in (slice(0, mid_x), slice(mid_x, w)):
            qa, qb = a[ys, xs], b[ys, xs]
            pixels = qa.shape[0] * qa.shape[1]
            count = count_differing_pixels(qa, qb, pixel_threshold)
            scores.append(count / pixels * scale)
    return scores


def zonal_difference(a: np.ndarray, b: np.ndarray, pixel_threshold: int = 50,
                     scale: float = 4096.0) -> float:
    """Worst-quadrant structural mismatch between two equally sized patches.

    The maximum, not the mean, is taken: a single distinguishing feature such
    as a beak or an ear has to decide the comparison even when the other
    three quadrants match almost perfectly.
    """
    if a.shape != b.shape:
        raise ValueError(f"Patch shapes differ: {a.shape} vs {b.shape}")
    return max(quadrant_scores(a, b, pixel_threshold, scale))


def size_mismatch(area_a: float, area_b: float) -> float:
    """Relative area difference in [0, 1)."""
    return abs(area_a - area_b) / max(area_a, area_b)


def composite_score(zonal_diff: float, hist_correlation: float,
                    hist_weight: float = 5000.0) -> float:
    return zonal_diff + (1.0 - hist_correlation) * hist_weight


def passes_gate(zonal_diff: float, hist_correlation: float, size_ratio: float,
                zonal_threshold: float, hist_threshold: float,
                size_ratio_threshold: float) -> bool:
    return (
        zonal_diff < zonal_threshold
        and hist_correlation > hist_threshold
        and size_ratio < size_ratio_threshold
    )


class SimilarityScorer:
    """Scores tile pairs with the thresholds of one ``MatchConfig``."""

    def __init__(self, config: MatchConfig):
        self.config = config

    def compare_descriptors(self, a: Descriptor, b: Descriptor) -> tuple:
        zonal = zonal_difference(
            a.structural, b.structural,
            pixel_threshold=self.config.pixel_diff_threshold,
            scale=self.config.zonal_scale,
        )
        correlation = compare_histograms(a.color_histogram, b.color_histogram)
        return zonal, correlation

    def compare(self, a: Tile, b: Tile) -> Similarity:
        cfg = self.config
        zonal, correlation = self.compare_descriptors(a.descriptor, b.descriptor)
        ratio = size_mismatch(a.area, b.area)
        accepted = passes_gate(
            zonal, correlation, ratio,
            cfg.zonal_threshold, cfg.hist_threshold, cfg.size_ratio_threshold,
        )
        return Similarity(
            zonal_diff=zonal,
            hist_correlation=correlation,
            size_ratio=ratio,
            score=composite_score(zonal, correlation, cfg.hist_weight),
            accepted=accepted,
        )
