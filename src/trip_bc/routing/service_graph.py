"""Legal scheduled legs for one weekday, indexed by origin station."""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from src.trip_bc.service_leg.domain.entities import ServiceLeg
from src.trip_bc.station.domain.station_directory import StationDirectory

logger = logging.getLogger(__name__)

MIN_TRAVEL_MINUTES = 15
MAX_TRAVEL_MINUTES = 60
BUCKET_MINUTES = 15

EMPTY: Tuple[ServiceLeg, ...] = ()


def time_bucket(value: datetime, minutes: int = BUCKET_MINUTES) -> datetime:
    """Round a timestamp down to the start of its ``minutes`` bucket."""
    return value.replace(
        minute=value.minute - value.minute % minutes,
        second=0,
        microsecond=0,
    )


def connection_bucket(arrival: datetime, layover_hours: int) -> datetime:
    """Bucket a next leg must depart in after arriving at ``arrival``."""
    return time_bucket(arrival + timedelta(hours=layover_hours))


def is_legal(
    leg: ServiceLeg,
    destination_station: str,
    destination_municipality: Optional[str],
) -> bool:
    """Travel time within bounds and no stop inside the destination
    municipality other than the destination station itself."""
    if not MIN_TRAVEL_MINUTES <= leg.travel_minutes <= MAX_TRAVEL_MINUTES:
        return False
    if leg.to_municipality == destination_municipality and leg.to_station != destination_station:
        return False
    return True


class ServiceGraph:
    """Adjacency of legal legs for one query.

    Legality depends on the query's destination, so a graph is built per
    query and never shared across destinations.
    """

    def __init__(
        self,
        day_of_week: int,
        destination_station: str,
        destination_municipality: Optional[str],
        legs: Iterable[ServiceLeg],
    ):
        self.day_of_week = day_of_week
        self.destination_station = destination_station
        self.destination_municipality = destination_municipality

        by_origin: Dict[str, List[ServiceLeg]] = defaultdict(list)
        by_departure: Dict[Tuple[str, datetime], List[ServiceLeg]] = defaultdict(list)
        for leg in legs:
            by_origin[leg.from_station].append(leg)
            by_departure[(leg.from_station, time_bucket(leg.departure))].append(leg)

        self._by_origin = {k: tuple(v) for k, v in by_origin.items()}
        self._by_departure = {k: tuple(v) for k, v in by_departure.items()}
        self._size = sum(len(v) for v in self._by_origin.values())

    @classmethod
    def build(
        cls,
        day_of_week: int,
        destination_station: str,
        destination_municipality: Optional[str],
        leg_source: Callable[[int], Sequence[ServiceLeg]],
        stations: Optional[StationDirectory] = None,
    ) -> "ServiceGraph":
        """Load the weekday's legs and keep the legal ones.

        Args:
            leg_source: callable returning the legs of a weekday; raises DataUnavailable
                when the partition is missing
            stations: when given, legs ending at a station without a
                reference record are dropped

        Raises:
            DataUnavailable: propagated from ``leg_source``
        """
        raw = leg_source(day_of_week)

        legal = []
        unknown = 0
        for leg in raw:
            if not is_legal(leg, destination_station, destination_municipality):
                continue
            if stations is not None and leg.to_station not in stations:
                unknown += 1
                continue
            legal.append(leg)

        if unknown:
            logger.debug(f"Dropped {unknown} legs ending at unknown stations")
        logger.info(
            f"Service graph day_of_week={day_of_week}: {len(legal):,} legal legs of {len(raw):,}"
        )
        return cls(day_of_week, destination_station, destination_municipality, legal)

    def legs_from(self, station: str) -> Tuple[ServiceLeg, ...]:
        """All legal legs leaving ``station``, in dataset order."""
        return self._by_origin.get(station, EMPTY)

    def legs_departing(self, station: str, bucket: datetime) -> Tuple[ServiceLeg, ...]:
        """Legal legs leaving ``station`` whose 15-minute departure bucket is ``bucket``."""
        return self._by_departure.get((station, bucket), EMPTY)

    def has_leg(self, from_station: str, to_station: str) -> bool:
        return any(leg.to_station == to_station for leg in self.legs_from(from_station))

    def __len__(self) -> int:
        return self._size
