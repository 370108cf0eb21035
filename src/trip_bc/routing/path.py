"""Candidate trip value type.

Each extension returns a new Path; nothing is shared or mutated between
alternatives, so sibling paths can be built on different threads.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Tuple

from src.trip_bc.service_leg.domain.entities import ServiceLeg


@dataclass(frozen=True)
class Path:
    """A chain of legs from the origin.

    time_schedule interleaves departure and arrival of every leg, so it
    holds two entries per leg. municipalities and provinces hold one entry
    per station.
    """

    stations: Tuple[str, ...]
    time_schedule: Tuple[datetime, ...]
    municipalities: Tuple[str, ...]
    provinces: Tuple[str, ...]
    travel_minutes: int
    monument_score: int
    terminated: bool = False
    reached: bool = False

    @classmethod
    def seed(cls, leg: ServiceLeg, monuments: int) -> "Path":
        """Two-station path made of a single first leg."""
        return cls(
            stations=(leg.from_station, leg.to_station),
            time_schedule=(leg.departure, leg.arrival),
            municipalities=(leg.from_municipality, leg.to_municipality),
            provinces=(leg.from_province, leg.to_province),
            travel_minutes=leg.travel_minutes,
            monument_score=monuments,
        )

    def extend(self, leg: ServiceLeg, monuments: int, reached: bool = False) -> "Path":
        """New path with ``leg`` appended. Reaching the goal terminates it."""
        return Path(
            stations=self.stations + (leg.to_station,),
            time_schedule=self.time_schedule + (leg.departure, leg.arrival),
            municipalities=self.municipalities + (leg.to_municipality,),
            provinces=self.provinces + (leg.to_province,),
            travel_minutes=self.travel_minutes + leg.travel_minutes,
            monument_score=self.monument_score + monuments,
            terminated=reached,
            reached=reached,
        )

    def mark_terminated(self) -> "Path":
        if self.terminated:
            return self
        return replace(self, terminated=True)

    @property
    def last_station(self) -> str:
        return self.stations[-1]

    @property
    def departure_time(self) -> datetime:
        return self.time_schedule[0]

    @property
    def arrival_time(self) -> datetime:
        return self.time_schedule[-1]

    @property
    def leg_count(self) -> int:
        return len(self.stations) - 1

    @property
    def province_count(self) -> int:
        return len(set(self.provinces))

    @property
    def station_key(self) -> Tuple[str, ...]:
        """Order-independent identity used for deduplication."""
        return tuple(sorted(self.stations))
