"""Trip query input and its validation."""

from dataclasses import dataclass, replace
from typing import Optional, Union

from src.trip_bc.exceptions import InvalidInput
from src.trip_bc.station.domain.station_directory import StationDirectory

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def day_name_to_iso_dow(name: str) -> int:
    """Convert an English day name to its ISO weekday (Monday=1 ... Sunday=7)."""
    cleaned = str(name or "").strip().capitalize()
    if cleaned not in DAY_NAMES:
        raise InvalidInput(f"Invalid day name: {name}")
    return DAY_NAMES.index(cleaned) + 1


def parse_day_of_week(value: Union[int, str]) -> int:
    """Accept either an ISO weekday number or an English day name."""
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if text.isdigit():
        return int(text)
    return day_name_to_iso_dow(text)


@dataclass(frozen=True)
class TripQuery:
    """Parameters of one same-day trip search.

    Departure hour/minute must match a first leg exactly; arrival_hour must
    match the hour of the last leg's arrival.
    """

    day_of_week: int
    origin_station: str
    departure_hour: int
    departure_minute: int
    destination_station: str
    arrival_hour: int
    layover_hours: int = 0
    destination_municipality: Optional[str] = None

    def validate(self, stations: StationDirectory) -> "TripQuery":
        """Check ranges and station codes before any search work.

        Returns:
            A copy with destination_municipality filled from the destination
            station when it was not given.

        Raises:
            InvalidInput: on the first offending parameter
        """
        _check_range("day_of_week", self.day_of_week, 1, 7)
        _check_range("departure_hour", self.departure_hour, 0, 23)
        _check_range("departure_minute", self.departure_minute, 0, 59)
        _check_range("arrival_hour", self.arrival_hour, 0, 23)
        if not _is_int(self.layover_hours) or self.layover_hours < 0:
            raise InvalidInput(f"layover_hours must be a non-negative integer, got {self.layover_hours}")

        if self.origin_station not in stations:
            raise InvalidInput(f"Unknown origin station: {self.origin_station}")
        destination = stations.get(self.destination_station)
        if destination is None:
            raise InvalidInput(f"Unknown destination station: {self.destination_station}")

        if self.destination_municipality:
            return self
        return replace(self, destination_municipality=destination.municipality_id)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_range(name: str, value, low: int, high: int) -> None:
    if not _is_int(value) or not low <= value <= high:
        raise InvalidInput(f"{name} must be between {low} and {high}, got {value}")
