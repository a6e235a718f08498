"""Final ordering of accepted pairs for display."""

from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from .config import DISPLAY_COLORS
from .planner import PairCandidate


def rank_pairs(
    pairs: Sequence[PairCandidate],
    max_pairs: int = 5,
    colors: Optional[Sequence[Tuple[int, int, int]]] = None,
) -> List[PairCandidate]:
    """Best ``max_pairs`` pairs by ascending score, each with a rank and colour.

    Colours repeat once the palette is exhausted. The input pairs are not
    modified.
    """
    palette = list(colors) if colors else DISPLAY_COLORS
    ordered = sorted(pairs, key=lambda p: p.score)
    return [
        replace(pair, rank=k, color=palette[k % len(palette)])
        for k, pair in enumerate(ordered[:max_pairs])
    ]
