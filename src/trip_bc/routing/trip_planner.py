"""Trip planner: validation, graph, expansion, dedup and ranking under a time budget."""

import logging
import time
from typing import Callable, List, Sequence

from src.trip_bc.exceptions import TripPlanningTimeout
from src.trip_bc.routing.deduplicator import deduplicate
from src.trip_bc.routing.path_expander import DEFAULT_MAX_LEGS, PathExpander, TerminationScope
from src.trip_bc.routing.ranker import RankedTrip, rank
from src.trip_bc.routing.service_graph import ServiceGraph
from src.trip_bc.routing.trip_query import TripQuery
from src.trip_bc.service_leg.domain.entities import ServiceLeg
from src.trip_bc.station.domain.station_directory import StationDirectory

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 15000


class TripPlanner:
    """Plans same-day multi-leg trips.

    Holds configuration only; every call to plan() is independent given the
    same station directory and leg source.
    """

    def __init__(
        self,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        max_legs: int = DEFAULT_MAX_LEGS,
        termination_scope: TerminationScope = TerminationScope.LINEAGE,
        workers: int = 1,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.timeout_ms = timeout_ms
        self.max_legs = max_legs
        self.termination_scope = TerminationScope(termination_scope)
        self.workers = workers
        self.clock = clock

    def plan(
        self,
        query: TripQuery,
        stations: StationDirectory,
        leg_source: Callable[[int], Sequence[ServiceLeg]],
    ) -> List[RankedTrip]:
        """Return ranked trip options; an empty list means no route.

        Raises:
            InvalidInput: bad parameters, before any search work
            DataUnavailable: no leg partition for the weekday
            TripPlanningTimeout: the budget ran out; nothing partial is returned
        """
        query = query.validate(stations)
        started = self.clock()
        deadline = started + self.timeout_ms / 1000.0

        graph = ServiceGraph.build(
            query.day_of_week,
            query.destination_station,
            query.destination_municipality,
            leg_source,
            stations,
        )
        expander = PathExpander(
            graph,
            stations,
            max_legs=self.max_legs,
            termination_scope=self.termination_scope,
            workers=self.workers,
            deadline=deadline,
            clock=self.clock,
        )

        try:
            terminated = expander.expand(query)
            arrivals = [path for path in terminated if path.reached]
            trips = rank(deduplicate(arrivals))
            if self.clock() > deadline:
                raise TripPlanningTimeout()
        except TripPlanningTimeout:
            logger.warning(
                f"Trip planning timed out after {self.timeout_ms}ms: "
                f"{query.origin_station} -> {query.destination_station} "
                f"day={query.day_of_week} layover={query.layover_hours}h"
            )
            raise

        elapsed_ms = (self.clock() - started) * 1000
        logger.info(
            f"Planned {query.origin_station} -> {query.destination_station}: "
            f"{len(arrivals)} arrivals, {len(trips)} distinct trips in {elapsed_ms:.0f}ms"
        )
        return trips
