"""Diversity-aware ordering of deduplicated trips."""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Set, Tuple

from src.trip_bc.routing.path import Path


@dataclass(frozen=True)
class RankedTrip:
    """A trip option with its final ranking key."""
    path: Path
    overlap_score: int

    @property
    def stations(self) -> Tuple[str, ...]:
        return self.path.stations

    @property
    def time_schedule(self) -> Tuple[datetime, ...]:
        return self.path.time_schedule

    @property
    def travel_minutes(self) -> int:
        return self.path.travel_minutes

    @property
    def monument_score(self) -> int:
        return self.path.monument_score


def rank(paths: Iterable[Path]) -> List[RankedTrip]:
    """Order trips so that options covering new ground come first.

    Paths are scanned from most to fewest provinces visited. Each path's
    overlap score counts its municipalities already covered by the paths
    scanned before it. Final order: overlap ascending, monuments
    descending, travel time ascending. Remaining ties keep scan order.
    """
    by_diversity = sorted(paths, key=lambda p: -p.province_count)

    footprint: Set[str] = set()
    scored = []
    for path in by_diversity:
        municipalities = set(path.municipalities)
        scored.append(RankedTrip(path=path, overlap_score=len(municipalities & footprint)))
        footprint |= municipalities

    scored.sort(key=lambda t: (t.overlap_score, -t.monument_score, t.travel_minutes))
    return scored
