"""Builds the per-weekday scheduled-leg dataset from the monthly services archive.

Every stop of a service is paired with every later stop of the same service,
so a leg is "board here, stay seated, alight there". One representative
calendar date per ISO weekday is taken from the week ending six days before
the reference date, which is the most recent fully published week.
"""

import io
import logging
from datetime import date, timedelta
from pathlib import Path
from typing import Dict, List

import pandas as pd
import requests

logger = logging.getLogger(__name__)

DEFAULT_SERVICES_URL = "https://opendata.rijdendetreinen.nl/public/services/services-{month}.csv.gz"

# Column names in the upstream archive
SERVICE_ID = "Service:RDT-ID"
SERVICE_DATE = "Service:Date"
STOP_CODE = "Stop:Station code"
STOP_ARRIVAL = "Stop:Arrival time"
STOP_DEPARTURE = "Stop:Departure time"

BUCKET = "5min"
MAX_LEG_MINUTES = 60
DOWNLOAD_TIMEOUT = 120
TIMEZONE = "Europe/Amsterdam"


def calendar_window(reference_date: date) -> Dict[date, int]:
    """Map the seven sampled service dates to their ISO weekday."""
    start = reference_date - timedelta(days=12)
    return {
        start + timedelta(days=offset): (start + timedelta(days=offset)).isoweekday()
        for offset in range(7)
    }


def to_local_time(values: pd.Series) -> pd.Series:
    """Parse offset-aware timestamps into naive local wall-clock times."""
    parsed = pd.to_datetime(values, errors="coerce", utc=True)
    return parsed.dt.tz_convert(TIMEZONE).dt.tz_localize(None)


class TrainServicesExporter:
    """Downloads, explodes and writes the leg dataset."""

    def __init__(self, url_template: str = DEFAULT_SERVICES_URL):
        self.url_template = url_template

    def download_services(self, reference_date: date) -> pd.DataFrame:
        """Fetch the monthly services archive for the reference date's month."""
        url = self.url_template.format(month=reference_date.strftime("%Y-%m"))
        logger.info(f"Downloading services archive {url}")
        response = requests.get(url, timeout=DOWNLOAD_TIMEOUT)
        response.raise_for_status()
        return pd.read_csv(io.BytesIO(response.content), compression="gzip")

    def build_legs(
        self,
        services: pd.DataFrame,
        stations: pd.DataFrame,
        reference_date: date,
    ) -> pd.DataFrame:
        """Turn raw stop events into bucketed origin/destination legs.

        Args:
            services: upstream rows (one per service stop)
            stations: station reference rows with station_code,
                municipality_sk and province_sk
            reference_date: date the dataset is built for

        Returns:
            DataFrame with one row per leg and a ``day_of_week`` column
        """
        window = calendar_window(reference_date)

        raw = services[[SERVICE_ID, SERVICE_DATE, STOP_CODE, STOP_ARRIVAL, STOP_DEPARTURE]].copy()
        raw[SERVICE_DATE] = pd.to_datetime(raw[SERVICE_DATE]).dt.date
        raw = raw[raw[SERVICE_DATE].isin(list(window))].copy()
        raw["day_of_week"] = raw[SERVICE_DATE].map(window)
        raw["arrival_time"] = to_local_time(raw[STOP_ARRIVAL])
        raw["departure_time"] = to_local_time(raw[STOP_DEPARTURE])

        refs = stations[["station_code", "municipality_sk", "province_sk"]]
        raw = raw.merge(refs, left_on=STOP_CODE, right_on="station_code", how="inner")

        raw = raw.sort_values([SERVICE_ID, "departure_time"], na_position="last", kind="mergesort")
        raw["stop_number"] = raw.groupby(SERVICE_ID).cumcount() + 1

        stops = raw[[
            SERVICE_ID, "day_of_week", "stop_number", "station_code",
            "arrival_time", "departure_time", "municipality_sk", "province_sk",
        ]]
        pairs = stops.merge(stops, on=SERVICE_ID, suffixes=("_from", "_to"))
        pairs = pairs[pairs["stop_number_from"] < pairs["stop_number_to"]]

        legs = pd.DataFrame({
            "day_of_week": pairs["day_of_week_from"],
            "service_id": pairs[SERVICE_ID],
            "departure_time_tb": pairs["departure_time_from"].dt.floor(BUCKET),
            "from_station_code": pairs["station_code_from"],
            "from_municipality_sk": pairs["municipality_sk_from"],
            "from_province_sk": pairs["province_sk_from"],
            "to_station_code": pairs["station_code_to"],
            "arrival_time_tb": pairs["arrival_time_to"].dt.floor(BUCKET),
            "to_municipality_sk": pairs["municipality_sk_to"],
            "to_province_sk": pairs["province_sk_to"],
        })

        minutes = (legs["arrival_time_tb"] - legs["departure_time_tb"]).dt.total_seconds() / 60
        keep = (legs["from_municipality_sk"] != legs["to_municipality_sk"]) & (minutes <= MAX_LEG_MINUTES)
        legs = legs[keep.fillna(False)].reset_index(drop=True)

        logger.info(f"Built {len(legs):,} legs from {len(raw):,} stop events")
        return legs

    def write_partitions(self, legs: pd.DataFrame, output_dir: Path) -> List[Path]:
        """Write one zstd parquet file per weekday, replacing existing ones."""
        output_dir = Path(output_dir)
        written = []
        for day_of_week, group in legs.groupby("day_of_week"):
            target = output_dir / f"day_of_week={int(day_of_week)}"
            target.mkdir(parents=True, exist_ok=True)
            path = target / "data_0.parquet"
            group.drop(columns=["day_of_week"]).to_parquet(path, compression="zstd", index=False)
            written.append(path)
            logger.info(f"  day_of_week={int(day_of_week)}: {len(group):,} legs")
        return written
