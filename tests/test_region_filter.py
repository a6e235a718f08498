"""Tests for the region filter, the geometry types and the matching config."""

from __future__ import annotations

import pytest

from tilematch.config import STRICTNESS_PRESETS, MatchConfig
from tilematch.geometry import Rect, Segment, Point, box_overlaps_rect
from tilematch.region_filter import filter_regions, is_tile_like, sort_reading_order


# ---------------------------------------------------------------------------
# Tests: Rect / Segment geometry
# ---------------------------------------------------------------------------


class TestGeometry:
    def test_rect_center_and_edges(self):
        r = Rect(10, 20, 40, 30)
        assert r.center == Point(30.0, 35.0)
        assert (r.right, r.bottom, r.area) == (50, 50, 1200)

    def test_rect_rejects_empty_size(self):
        with pytest.raises(ValueError):
            Rect(0, 0, 0, 10)

    def test_touching_boxes_do_not_overlap(self):
        r = Rect(10, 10, 10, 10)
        assert not box_overlaps_rect((0, 0, 10, 30), r)
        assert box_overlaps_rect((0, 0, 10.5, 30), r)

    def test_horizontal_band(self):
        seg = Segment(Point(0, 50), Point(100, 50))
        assert seg.is_horizontal
        assert seg.band(20) == (0, 40, 100, 60)

    def test_vertical_band(self):
        seg = Segment(Point(30, 100), Point(30, 0))
        assert not seg.is_horizontal
        assert seg.band(10) == (25, 0, 35, 100)


# ---------------------------------------------------------------------------
# Tests: Area / aspect filtering
# ---------------------------------------------------------------------------


class TestRegionFilter:
    def test_small_fraction_rejected(self):
        """20x20 = 400px is 0.04% of a 1000x1000 frame, below the 0.5% floor."""
        config = MatchConfig(min_area_frac=0.005)
        assert filter_regions([Rect(100, 100, 20, 20)], 1000, 1000, config) == []

    def test_tile_sized_region_kept(self):
        config = MatchConfig()
        kept = filter_regions([Rect(100, 100, 100, 100)], 1000, 1000, config)
        assert kept == [Rect(100, 100, 100, 100)]

    def test_oversized_region_rejected(self):
        config = MatchConfig(max_area_frac=0.10)
        # 400x400 is 16% of the frame
        assert not is_tile_like(Rect(0, 0, 400, 400), 1_000_000, config)

    def test_area_bounds_are_exclusive(self):
        config = MatchConfig(min_area_frac=0.01, max_area_frac=0.04)
        frame_area = 100 * 100
        assert not is_tile_like(Rect(0, 0, 10, 10), frame_area, config)   # exactly 1%
        assert not is_tile_like(Rect(0, 0, 20, 20), frame_area, config)   # exactly 4%
        assert is_tile_like(Rect(0, 0, 15, 15), frame_area, config)

    def test_elongated_regions_rejected(self):
        config = MatchConfig()
        frame_area = 1000 * 1000
        assert not is_tile_like(Rect(0, 0, 140, 100), frame_area, config)  # 1.4
        assert not is_tile_like(Rect(0, 0, 70, 100), frame_area, config)   # 0.7, exclusive
        assert is_tile_like(Rect(0, 0, 120, 100), frame_area, config)

    def test_mixed_detections(self):
        config = MatchConfig()
        regions = [
            Rect(0, 0, 5, 5),          # noise
            Rect(100, 100, 80, 80),    # tile
            Rect(0, 0, 900, 30),       # bar
            Rect(300, 100, 80, 80),    # tile
        ]
        kept = filter_regions(regions, 1000, 1000, config)
        assert kept == [Rect(100, 100, 80, 80), Rect(300, 100, 80, 80)]


# ---------------------------------------------------------------------------
# Tests: Reading order
# ---------------------------------------------------------------------------


class TestReadingOrder:
    def test_rows_then_columns(self):
        rects = [
            Rect(200, 105, 40, 40),
            Rect(10, 160, 40, 40),
            Rect(10, 100, 40, 40),
            Rect(100, 98, 40, 40),
        ]
        ordered = sort_reading_order(rects)
        assert ordered == [
            Rect(10, 100, 40, 40),
            Rect(100, 98, 40, 40),
            Rect(200, 105, 40, 40),
            Rect(10, 160, 40, 40),
        ]

    def test_jitter_within_half_height_stays_in_row(self):
        rects = [Rect(60, 119, 40, 40), Rect(10, 100, 40, 40)]
        assert [r.x for r in sort_reading_order(rects)] == [10, 60]

    def test_large_step_starts_new_row(self):
        rects = [Rect(10, 121, 40, 40), Rect(60, 100, 40, 40)]
        assert [r.x for r in sort_reading_order(rects)] == [60, 10]

    def test_identical_boxes_keep_detector_order(self):
        a = Rect(10, 10, 40, 40)
        b = Rect(10, 10, 40, 40)
        ordered = sort_reading_order([a, b])
        assert ordered[0] is a and ordered[1] is b


# ---------------------------------------------------------------------------
# Tests: Config
# ---------------------------------------------------------------------------


class TestMatchConfig:
    def test_defaults_validate(self):
        MatchConfig().validate()

    @pytest.mark.parametrize("name", sorted(STRICTNESS_PRESETS))
    def test_presets(self, name):
        config = MatchConfig.from_preset(name)
        assert config.zonal_threshold == STRICTNESS_PRESETS[name]["zonal_threshold"]
        assert config.hist_threshold == STRICTNESS_PRESETS[name]["hist_threshold"]

    def test_preset_overrides(self):
        config = MatchConfig.from_preset("strict", max_display_pairs=2)
        assert config.max_display_pairs == 2
        assert config.zonal_threshold == 1200.0

    def test_unknown_preset(self):
        with pytest.raises(ValueError):
            MatchConfig.from_preset("extreme")

    def test_with_overrides_ignores_none(self):
        config = MatchConfig().with_overrides(zonal_threshold=None, hist_threshold=0.75)
        assert config.zonal_threshold == 1500.0
        assert config.hist_threshold == 0.75

    def test_with_overrides_rejects_unknown(self):
        with pytest.raises(ValueError):
            MatchConfig().with_overrides(beak_weight=3)

    @pytest.mark.parametrize("overrides", [
        {"min_area_frac": 0.2, "max_area_frac": 0.1},
        {"aspect_min": 1.5, "aspect_max": 1.3},
        {"crop_margin_frac": 0.5},
        {"patch_size": 31},
        {"hist_threshold": 1.5},
        {"path_thickness": -1.0},
        {"workers": 0},
        {"blur_ksize": 4},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            MatchConfig(**overrides).validate()
