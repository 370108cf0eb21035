"""Layer-by-layer expansion of candidate trips.

Layer k holds every live path with k legs. All children of a layer are
materialized before any termination decision is made for that layer, which
is the only synchronization point; paths inside a layer are independent and
may be extended on a thread pool.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable, List, Optional

from src.trip_bc.exceptions import TripPlanningTimeout
from src.trip_bc.routing.path import Path
from src.trip_bc.routing.service_graph import ServiceGraph, connection_bucket
from src.trip_bc.routing.trip_query import TripQuery
from src.trip_bc.station.domain.station_directory import StationDirectory

logger = logging.getLogger(__name__)

DEFAULT_MAX_LEGS = 8


class TerminationScope(str, Enum):
    """Which paths stop growing once the destination is reached.

    LINEAGE: only the path that reached the destination.
    FRONTIER: every path produced in the same layer. Siblings that did not
        reach the destination are then dropped from the results.
    """
    LINEAGE = "lineage"
    FRONTIER = "frontier"


class PathExpander:
    """Grows paths from the origin until they terminate or run out of legs."""

    def __init__(
        self,
        graph: ServiceGraph,
        stations: StationDirectory,
        max_legs: int = DEFAULT_MAX_LEGS,
        termination_scope: TerminationScope = TerminationScope.LINEAGE,
        workers: int = 1,
        deadline: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_legs < 1:
            raise ValueError(f"max_legs must be at least 1, got {max_legs}")
        self.graph = graph
        self.stations = stations
        self.max_legs = max_legs
        self.termination_scope = TerminationScope(termination_scope)
        self.workers = max(1, workers)
        self.deadline = deadline
        self.clock = clock

    def seed(self, query: TripQuery) -> List[Path]:
        """First-leg paths leaving the origin at exactly the requested time.

        A first leg straight to the destination is never a seed.
        """
        seeds = []
        for leg in self.graph.legs_from(query.origin_station):
            if leg.departure.hour != query.departure_hour or leg.departure.minute != query.departure_minute:
                continue
            if leg.to_station == query.destination_station:
                continue
            seeds.append(Path.seed(leg, self.stations[leg.to_station].monument_count))
        return seeds

    def extend(self, path: Path, query: TripQuery) -> List[Path]:
        """All legal one-leg extensions of a live path."""
        self._check_deadline()

        children = []
        bucket = connection_bucket(path.arrival_time, query.layover_hours)
        for leg in self.graph.legs_departing(path.last_station, bucket):
            reaches = (
                leg.to_station == query.destination_station
                and leg.arrival.hour == query.arrival_hour
            )
            explores = (
                leg.to_municipality not in path.municipalities
                and leg.to_municipality != query.destination_municipality
            )
            if not (reaches or explores):
                continue
            monuments = self.stations[leg.to_station].monument_count
            children.append(path.extend(leg, monuments, reached=reaches))
        return children

    def expand(self, query: TripQuery) -> List[Path]:
        """Run the search and return every terminated path, in discovery order.

        Raises:
            TripPlanningTimeout: the deadline passed before the search ended
        """
        frontier = self.seed(query)
        terminated: List[Path] = []
        legs = 1
        logger.debug(f"Seeded {len(frontier)} paths from {query.origin_station}")

        executor = ThreadPoolExecutor(max_workers=self.workers) if self.workers > 1 else None
        try:
            while frontier:
                if legs >= self.max_legs:
                    logger.info(
                        f"Depth bound of {self.max_legs} legs reached, "
                        f"discarding {len(frontier)} live paths"
                    )
                    break

                children = self._expand_layer(frontier, query, executor)
                if self.termination_scope is TerminationScope.FRONTIER and any(c.terminated for c in children):
                    children = [c.mark_terminated() for c in children]

                terminated.extend(c for c in children if c.terminated)
                frontier = [c for c in children if not c.terminated]
                legs += 1
                logger.debug(f"Layer {legs}: {len(children)} paths, {len(frontier)} live")
        finally:
            if executor is not None:
                executor.shutdown(wait=True, cancel_futures=True)

        return terminated

    def _expand_layer(
        self,
        frontier: List[Path],
        query: TripQuery,
        executor: Optional[ThreadPoolExecutor],
    ) -> List[Path]:
        if executor is None:
            batches = [self.extend(path, query) for path in frontier]
        else:
            # map() yields in input order, so the layer is identical to the sequential one
            batches = list(executor.map(lambda p: self.extend(p, query), frontier))
        return [child for batch in batches for child in batch]

    def _check_deadline(self) -> None:
        if self.deadline is not None and self.clock() > self.deadline:
            raise TripPlanningTimeout()
