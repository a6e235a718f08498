"""Greedy disjoint pairing of tiles.

Tiles are visited in id order. Each unvisited tile takes its gated candidates
in order of composite score and keeps the first one a legal path can reach.
Both tiles are then marked visited for the rest of the run, which keeps the
result disjoint without backtracking. This is not a maximum matching.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .connectivity import ConnectivityValidator
from .descriptor import Tile
from .geometry import Rect
from .similarity import SimilarityScorer

logger = logging.getLogger(__name__)


@dataclass
class PairCandidate:
    """Two tiles proposed as an eliminable pair. Lower score = more similar."""
    a: Tile
    b: Tile
    score: float
    connected: bool = False
    rank: Optional[int] = None
    color: Optional[Tuple[int, int, int]] = None

    def __post_init__(self):
        if self.a.id == self.b.id:
            raise ValueError(f"A pair needs two distinct tiles, got id {self.a.id} twice")

    @property
    def ids(self) -> Tuple[int, int]:
        return (self.a.id, self.b.id)


class MatchPlanner:
    """Pairs tiles using a scorer for ranking and a validator for reachability."""

    def __init__(self, scorer: SimilarityScorer, validator: ConnectivityValidator):
        self.scorer = scorer
        self.validator = validator

    def candidates_for(self, anchor: Tile, tiles: Sequence[Tile],
                       visited: List[bool]) -> List[PairCandidate]:
        """Gated partners of ``anchor`` among later unvisited tiles, best first."""
        found = []
        for other in tiles:
            if other.id <= anchor.id or visited[other.id]:
                continue
            sim = self.scorer.compare(anchor, other)
            if sim.accepted:
                found.append(PairCandidate(a=anchor, b=other, score=sim.score))
        found.sort(key=lambda c: (c.score, c.b.id))
        return found

    def plan(self, tiles: Sequence[Tile],
             obstacles: Optional[Sequence[Rect]] = None) -> List[PairCandidate]:
        """Return disjoint connected pairs in discovery order.

        ``obstacles`` defaults to the tiles' own rectangles; pass every tile
        left on the board when some could not be described.
        """
        if obstacles is None:
            obstacles = [t.rect for t in tiles]
        ordered = sorted(tiles, key=lambda t: t.id)
        size = max((t.id for t in ordered), default=-1) + 1
        visited = [False] * size

        pairs: List[PairCandidate] = []
        for anchor in ordered:
            if visited[anchor.id]:
                continue
            candidates = self.candidates_for(anchor, ordered, visited)
            for candidate in candidates:
                others = [r for r in obstacles
                          if r != anchor.rect and r != candidate.b.rect]
                if self.validator.is_connected(anchor.rect, candidate.b.rect, others):
                    candidate.connected = True
                    pairs.append(candidate)
                    visited[anchor.id] = True
                    visited[candidate.b.id] = True
                    break
            else:
                if candidates:
                    logger.debug("Tile %d: %d similar tiles, none reachable",
                                 anchor.id, len(candidates))
        logger.debug("Planner paired %d of %d tiles", 2 * len(pairs), len(ordered))
        return pairs
