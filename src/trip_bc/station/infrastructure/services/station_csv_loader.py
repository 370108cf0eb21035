"""Station reference file loader.

Parses ``train_stations.csv`` into Station records. Malformed rows are
skipped with a warning; a malformed file as a whole raises DataUnavailable.
"""

import csv
import io
import logging
import math
from pathlib import Path
from typing import Dict, List, Optional

from src.trip_bc.exceptions import DataUnavailable
from src.trip_bc.station.domain.entities import Station

logger = logging.getLogger(__name__)

REQUIRED_HEADERS = (
    "station_code",
    "station_name",
    "lat",
    "lon",
    "municipality_sk",
    "province_sk",
    "number_of_monuments",
)

# Leading characters that spreadsheet tools interpret as formulas
FORMULA_PREFIXES = ("=", "+", "-", "@")
UNSAFE_CHARS = str.maketrans("", "", "<>'\"&")
MAX_NAME_LENGTH = 100


def sanitize(value: Optional[str]) -> str:
    """Trim and drop characters that are unsafe to echo into HTML."""
    if not value:
        return ""
    return value.strip().translate(UNSAFE_CHARS)


class StationCsvLoader:
    """Loads and validates station reference records."""

    def __init__(
        self,
        max_bytes: int = 1_000_000,
        lat_bounds: tuple = (50.0, 54.0),
        lon_bounds: tuple = (3.0, 8.0),
    ):
        self.max_bytes = max_bytes
        self.lat_bounds = lat_bounds
        self.lon_bounds = lon_bounds

    def load(self, path: Path) -> List[Station]:
        """Read stations from a CSV file on disk."""
        path = Path(path)
        if not path.is_file():
            logger.error(f"Station file not found: {path}")
            raise DataUnavailable("Station reference data is not available")

        text = path.read_text(encoding="utf-8")
        stations = self.parse(text)
        logger.info(f"Loaded {len(stations)} stations")
        return stations

    def parse(self, text: str) -> List[Station]:
        """Parse CSV text into stations.

        Raises:
            DataUnavailable: if the text is empty, too large, or lacks a
                required header.
        """
        if not text or not isinstance(text, str):
            raise DataUnavailable("Station reference data is empty")
        if len(text) > self.max_bytes:
            raise DataUnavailable("Station reference data is too large")

        if text.startswith("\ufeff"):
            text = text[1:]

        lines = [line for line in text.splitlines() if line.strip()]
        if len(lines) < 2:
            raise DataUnavailable("Station reference data is malformed")

        rows = list(csv.reader(io.StringIO("\n".join(lines))))
        header = [h.strip() for h in rows[0]]
        missing = [h for h in REQUIRED_HEADERS if h not in header]
        if missing:
            logger.error(f"Station file missing headers: {missing}")
            raise DataUnavailable("Station reference data is malformed")

        stations = []
        for line_num, fields in enumerate(rows[1:], start=2):
            station = self._parse_row(header, fields, line_num)
            if station is not None:
                stations.append(station)
        return stations

    def _parse_row(self, header: List[str], fields: List[str], line_num: int) -> Optional[Station]:
        if fields and fields[0].startswith(FORMULA_PREFIXES):
            logger.warning(f"Potential CSV injection attempt at line {line_num}")
            return None

        if len(fields) != len(header):
            logger.warning(f"Invalid field count at line {line_num}")
            return None

        row: Dict[str, str] = dict(zip(header, fields))

        name = (row["station_name"] or "").strip()
        if not name or len(name) > MAX_NAME_LENGTH:
            return None

        try:
            lat = float(row["lat"])
            lon = float(row["lon"])
        except ValueError:
            return None
        if math.isnan(lat) or math.isnan(lon):
            return None

        if not (self.lat_bounds[0] <= lat <= self.lat_bounds[1]) or not (
            self.lon_bounds[0] <= lon <= self.lon_bounds[1]
        ):
            logger.warning(f"Coordinates out of bounds at line {line_num}")
            return None

        code = sanitize(row["station_code"])
        if not code:
            return None

        try:
            monuments = max(int(float(row["number_of_monuments"] or 0)), 0)
        except (ValueError, OverflowError):
            monuments = 0

        return Station.from_csv_row({
            "station_code": code,
            "station_name": sanitize(name),
            "lat": lat,
            "lon": lon,
            "municipality_sk": sanitize(row["municipality_sk"]),
            "province_sk": sanitize(row["province_sk"]),
            "number_of_monuments": monuments,
        })
