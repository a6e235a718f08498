"""Matching configuration: thresholds, strictness presets, display palette."""

from dataclasses import dataclass, field, fields, replace
from typing import Dict, List, Optional, Tuple


# ---------------------------------------------------------------------------
# Patch / descriptor constants
# ---------------------------------------------------------------------------
PATCH_SIZE = 32

# Hue / saturation bins of the colour signature (OpenCV hue runs 0-179)
HIST_BINS = (50, 60)

# A fully mismatched quadrant scores this much, whatever the patch size.
# Equals the pixel count of a 64x64 reference quadrant.
ZONAL_SCALE = 4096.0

# Converts the histogram penalty into the numeric range of the zonal score
HIST_WEIGHT = 5000.0


# ---------------------------------------------------------------------------
# Strictness tiers (zonal threshold, histogram correlation threshold)
# ---------------------------------------------------------------------------
STRICTNESS_PRESETS: Dict[str, Dict[str, float]] = {
    "lenient": {"zonal_threshold": 1800.0, "hist_threshold": 0.70},
    "normal": {"zonal_threshold": 1500.0, "hist_threshold": 0.80},
    "strict": {"zonal_threshold": 1200.0, "hist_threshold": 0.90},
}


# ---------------------------------------------------------------------------
# Hint colours by rank (RGB)
# ---------------------------------------------------------------------------
DISPLAY_COLORS: List[Tuple[int, int, int]] = [
    (255, 0, 0),     # red
    (0, 255, 0),     # green
    (0, 0, 255),     # blue
    (255, 255, 0),   # yellow
    (255, 0, 255),   # magenta
]

# Faint outline for every raw detection in debug overlays
RAW_REGION_COLOR = (100, 100, 100)


@dataclass
class MatchConfig:
    """Tunable options for one pair-detection run.

    The thresholds are empirical; different game skins and tile sizes call
    for different values, so every one of them can be overridden.
    """
    # Region filter
    min_area_frac: float = 0.005         # of the frame area, exclusive
    max_area_frac: float = 0.10          # of the frame area, exclusive
    aspect_min: float = 0.7              # width / height, exclusive
    aspect_max: float = 1.3
    row_bucket_frac: float = 0.5         # same row if |dy| <= frac * height

    # Descriptor extraction
    crop_margin_frac: float = 0.25       # per side, of the tile size
    crop_margin_px: Optional[int] = None  # fixed margin, overrides the fraction
    patch_size: int = PATCH_SIZE
    hist_bins: Tuple[int, int] = HIST_BINS
    workers: int = 1

    # Similarity
    pixel_diff_threshold: int = 50
    zonal_scale: float = ZONAL_SCALE
    hist_weight: float = HIST_WEIGHT
    zonal_threshold: float = 1500.0
    hist_threshold: float = 0.80
    size_ratio_threshold: float = 0.15

    # Connectivity; None derives it from the tile size
    path_thickness: Optional[float] = None

    # Ranking
    max_display_pairs: int = 5
    display_colors: List[Tuple[int, int, int]] = field(
        default_factory=lambda: list(DISPLAY_COLORS)
    )

    # Region detection front end
    blur_ksize: int = 5
    dilate_iterations: int = 1

    @classmethod
    def from_preset(cls, name: str, **overrides) -> "MatchConfig":
        """Build a config from a strictness tier, then apply overrides."""
        if name not in STRICTNESS_PRESETS:
            raise ValueError(
                f"Unknown strictness preset: {name} "
                f"(expected one of {sorted(STRICTNESS_PRESETS)})"
            )
        values = dict(STRICTNESS_PRESETS[name])
        values.update(overrides)
        config = cls(**values)
        config.validate()
        return config

    def with_overrides(self, **overrides) -> "MatchConfig":
        """Copy of this config with the non-None overrides applied."""
        known = {f.name for f in fields(self)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"Unknown config option(s): {sorted(unknown)}")
        updated = replace(self, **{k: v for k, v in overrides.items() if v is not None})
        updated.validate()
        return updated

    def validate(self) -> None:
        if not 0.0 <= self.min_area_frac < self.max_area_frac <= 1.0:
            raise ValueError(
                f"Area fractions must satisfy 0 <= min < max <= 1, "
                f"got {self.min_area_frac}, {self.max_area_frac}"
            )
        if not 0.0 < self.aspect_min < self.aspect_max:
            raise ValueError(
                f"Aspect bounds must satisfy 0 < min < max, "
                f"got {self.aspect_min}, {self.aspect_max}"
            )
        if not 0.0 <= self.crop_margin_frac < 0.5:
            raise ValueError(f"crop_margin_frac must be in [0, 0.5), got {self.crop_margin_frac}")
        if self.crop_margin_px is not None and self.crop_margin_px < 0:
            raise ValueError(f"crop_margin_px must be >= 0, got {self.crop_margin_px}")
        if self.patch_size < 2 or self.patch_size % 2:
            raise ValueError(f"patch_size must be an even number >= 2, got {self.patch_size}")
        if len(self.hist_bins) != 2 or min(self.hist_bins) < 1:
            raise ValueError(f"hist_bins must be two positive counts, got {self.hist_bins}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if not 0 <= self.pixel_diff_threshold < 255:
            raise ValueError(
                f"pixel_diff_threshold must be in [0, 255), got {self.pixel_diff_threshold}"
            )
        if not -1.0 <= self.hist_threshold <= 1.0:
            raise ValueError(f"hist_threshold must be in [-1, 1], got {self.hist_threshold}")
        if self.zonal_threshold <= 0 or self.size_ratio_threshold <= 0:
            raise ValueError("zonal_threshold and size_ratio_threshold must be positive")
        if self.path_thickness is not None and self.path_thickness < 0:
            raise ValueError(f"path_thickness must be >= 0, got {self.path_thickness}")
        if self.max_display_pairs < 0:
            raise ValueError(f"max_display_pairs must be >= 0, got {self.max_display_pairs}")
        if not self.display_colors:
            raise ValueError("display_colors must not be empty")
        if self.blur_ksize < 1 or self.blur_ksize % 2 == 0:
            raise ValueError(f"blur_ksize must be a positive odd number, got {self.blur_ksize}")

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}
