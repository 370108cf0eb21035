"""Reads one day-of-week partition of the scheduled-leg dataset.

Layout written by the provisioning job::

    train_services.parquet/
        day_of_week=1/data_0.parquet
        ...
        day_of_week=7/data_0.parquet
"""

import logging
from pathlib import Path
from typing import List

import pandas as pd

from src.trip_bc.exceptions import DataUnavailable, InvalidInput
from src.trip_bc.service_leg.domain.entities import ServiceLeg

logger = logging.getLogger(__name__)

LEG_COLUMNS = [
    "from_station_code",
    "to_station_code",
    "departure_time_tb",
    "arrival_time_tb",
    "from_municipality_sk",
    "to_municipality_sk",
    "from_province_sk",
    "to_province_sk",
]


def partition_path(services_dir: Path, day_of_week: int) -> Path:
    return Path(services_dir) / f"day_of_week={day_of_week}"


class LegPartitionReader:
    """Loads ServiceLeg records for a single weekday."""

    def __init__(self, services_dir: Path):
        self.services_dir = Path(services_dir)

    def available_days(self) -> List[int]:
        """Weekdays (1-7) that have a partition on disk."""
        return [d for d in range(1, 8) if partition_path(self.services_dir, d).is_dir()]

    def read(self, day_of_week: int) -> List[ServiceLeg]:
        """Read all legs for ``day_of_week`` (Monday=1 ... Sunday=7).

        Raises:
            InvalidInput: day_of_week outside 1-7
            DataUnavailable: no partition for that day, or it cannot be read
        """
        if not isinstance(day_of_week, int) or not 1 <= day_of_week <= 7:
            raise InvalidInput(f"day_of_week must be between 1 and 7, got {day_of_week}")

        path = partition_path(self.services_dir, day_of_week)
        if not path.is_dir():
            logger.error(f"Leg partition missing: {path}")
            raise DataUnavailable(f"No timetable data for day_of_week={day_of_week}")

        try:
            df = pd.read_parquet(path, columns=LEG_COLUMNS)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read leg partition {path}: {e}")
            raise DataUnavailable(f"Timetable data for day_of_week={day_of_week} is unreadable") from e

        df = df.dropna(subset=["departure_time_tb", "arrival_time_tb"])
        legs = [
            ServiceLeg(
                from_station=str(row.from_station_code),
                to_station=str(row.to_station_code),
                departure=pd.Timestamp(row.departure_time_tb).to_pydatetime(),
                arrival=pd.Timestamp(row.arrival_time_tb).to_pydatetime(),
                from_municipality=str(row.from_municipality_sk),
                to_municipality=str(row.to_municipality_sk),
                from_province=str(row.from_province_sk),
                to_province=str(row.to_province_sk),
            )
            for row in df.itertuples(index=False)
        ]
        logger.info(f"Loaded {len(legs):,} legs for day_of_week={day_of_week}")
        return legs
