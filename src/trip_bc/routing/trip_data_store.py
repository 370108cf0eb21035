"""Caller-owned data session for the trip planner.

Holds the station directory and caches one leg partition per weekday.
Created, opened and closed explicitly by whoever owns it (the FastAPI
lifespan, a script, a test); there is no module-level instance.
"""

import logging
import threading
import time
from pathlib import Path
from typing import Dict, List, Optional

from src.trip_bc.exceptions import DataUnavailable
from src.trip_bc.service_leg.domain.entities import ServiceLeg
from src.trip_bc.service_leg.infrastructure.services.leg_partition_reader import LegPartitionReader
from src.trip_bc.station.domain.station_directory import StationDirectory
from src.trip_bc.station.infrastructure.services.station_csv_loader import StationCsvLoader

logger = logging.getLogger(__name__)


class TripDataStore:
    """Read-only datasets shared by concurrent planning requests.

    Thread-safe for concurrent reads; a lock serializes partition loads
    and reloads.
    """

    def __init__(
        self,
        stations_path: Path,
        services_dir: Path,
        station_loader: Optional[StationCsvLoader] = None,
        leg_reader: Optional[LegPartitionReader] = None,
    ):
        self.stations_path = Path(stations_path)
        self.station_loader = station_loader or StationCsvLoader()
        self.leg_reader = leg_reader or LegPartitionReader(services_dir)

        self._stations: Optional[StationDirectory] = None
        self._legs_by_day: Dict[int, List[ServiceLeg]] = {}
        self._lock = threading.Lock()

        self.load_time_seconds = 0.0
        self.stats: Dict[str, int] = {}

    @property
    def is_loaded(self) -> bool:
        return self._stations is not None

    def open(self) -> "TripDataStore":
        """Load the station directory. Leg partitions load on first use."""
        with self._lock:
            if self._stations is None:
                self._load_stations()
        return self

    def close(self) -> None:
        """Drop every cached dataset."""
        with self._lock:
            self._stations = None
            self._legs_by_day.clear()
            self.stats.clear()
        logger.info("Trip data store closed")

    def reload(self) -> None:
        """Reload stations and forget cached partitions.

        Requests in flight keep the objects they already hold.
        """
        with self._lock:
            self._legs_by_day = {}
            self._load_stations()

    def __enter__(self) -> "TripDataStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def stations(self) -> StationDirectory:
        if self._stations is None:
            raise DataUnavailable("Station reference data is not loaded")
        return self._stations

    def legs_for(self, day_of_week: int) -> List[ServiceLeg]:
        """Service legs running on a weekday (1=Mon..7=Sun), cached per weekday."""
        legs = self._legs_by_day.get(day_of_week)
        if legs is not None:
            return legs

        with self._lock:
            # Double-check
            legs = self._legs_by_day.get(day_of_week)
            if legs is None:
                legs = self.leg_reader.read(day_of_week)
                self._legs_by_day[day_of_week] = legs
                self.stats[f"legs_day_{day_of_week}"] = len(legs)
        return legs

    def _load_stations(self) -> None:
        start = time.time()
        self._stations = StationDirectory.from_stations(self.station_loader.load(self.stations_path))
        self.load_time_seconds = time.time() - start
        self.stats["stations"] = len(self._stations)
        logger.info(f"Trip data store opened: {len(self._stations)} stations in {self.load_time_seconds:.2f}s")
