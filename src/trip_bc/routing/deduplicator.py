from typing import Dict, Iterable, List, Tuple

from src.trip_bc.routing.path import Path


def deduplicate(paths: Iterable[Path]) -> List[Path]:
    """Keep the fastest path per set of visited stations.

    Ties on travel time keep the first path seen. Groups are returned in
    the order their first member was seen.
    """
    best: Dict[Tuple[str, ...], Path] = {}
    for path in paths:
        key = path.station_key
        current = best.get(key)
        if current is None or path.travel_minutes < current.travel_minutes:
            best[key] = path
    return list(best.values())
