"""In-memory station lookup used by the trip planner."""

from typing import Dict, Iterable, Iterator, List, Optional

from src.trip_bc.station.domain.entities import Station
from src.trip_bc.exceptions import DataUnavailable


class StationDirectory:
    """Read-only mapping of station code -> Station.

    Built once per data session and shared freely between planner threads.
    """

    def __init__(self, stations: Dict[str, Station]):
        self._stations = dict(stations)

    @classmethod
    def from_stations(cls, stations: Iterable[Station]) -> "StationDirectory":
        """Index stations by code. Later duplicates replace earlier ones."""
        by_code = {station.code: station for station in stations}
        if not by_code:
            raise DataUnavailable("No station records available")
        return cls(by_code)

    def get(self, code: str) -> Optional[Station]:
        return self._stations.get(code)

    def __getitem__(self, code: str) -> Station:
        return self._stations[code]

    def __contains__(self, code: object) -> bool:
        return code in self._stations

    def __len__(self) -> int:
        return len(self._stations)

    def __iter__(self) -> Iterator[Station]:
        return iter(self._stations.values())

    def sorted_by_name(self) -> List[Station]:
        """Stations ordered by name, for pickers."""
        return sorted(self._stations.values(), key=lambda s: (s.name, s.code))
