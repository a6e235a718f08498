"""Public interface for the tilematch pair hint toolkit."""

from .config import MatchConfig
from .connectivity import ConnectivityValidator
from .descriptor import Descriptor, DescriptorExtractionError, Tile
from .detector import analyze_image, detect_regions, load_frame
from .geometry import Point, Rect
from .overlay import render_hints, save_overlay
from .pipeline import FrameError, MatchResult, PairDetector, detect_pairs
from .planner import MatchPlanner, PairCandidate
from .similarity import SimilarityScorer

__all__ = [
    "ConnectivityValidator",
    "Descriptor",
    "DescriptorExtractionError",
    "FrameError",
    "MatchConfig",
    "MatchPlanner",
    "MatchResult",
    "PairCandidate",
    "PairDetector",
    "Point",
    "Rect",
    "SimilarityScorer",
    "Tile",
    "analyze_image",
    "detect_pairs",
    "detect_regions",
    "load_frame",
    "render_hints",
    "save_overlay",
]
