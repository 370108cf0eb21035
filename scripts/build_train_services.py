#!/usr/bin/env python3
"""Build the per-weekday scheduled-leg dataset used by the trip planner.

Downloads the monthly services archive, keeps one service date per ISO
weekday and writes one parquet partition per weekday.

Usage:
    # Build for today
    python scripts/build_train_services.py --stations data/train_stations.csv --output data/train_services.parquet

    # Build for a given reference date from an already downloaded archive
    python scripts/build_train_services.py --date 2024-05-20 \\
        --stations data/train_stations.csv --output data/train_services.parquet \\
        --services-file services-2024-05.csv.gz
"""

import sys
import argparse
import logging
from datetime import date, datetime
from pathlib import Path

import pandas as pd
import requests

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from core.config import settings
from src.trip_bc.exceptions import DataUnavailable
from src.trip_bc.service_leg.infrastructure.services.train_services_exporter import TrainServicesExporter
from src.trip_bc.station.infrastructure.services.station_csv_loader import StationCsvLoader

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD")


def load_station_frame(path: Path) -> pd.DataFrame:
    """Validated station rows as the DataFrame the exporter joins on."""
    loader = StationCsvLoader(
        max_bytes=settings.data.MAX_STATIONS_FILE_BYTES,
        lat_bounds=(settings.data.LAT_MIN, settings.data.LAT_MAX),
        lon_bounds=(settings.data.LON_MIN, settings.data.LON_MAX),
    )
    stations = loader.load(path)
    return pd.DataFrame({
        "station_code": [s.code for s in stations],
        "municipality_sk": [s.municipality_id for s in stations],
        "province_sk": [s.province_id for s in stations],
    })


def main():
    parser = argparse.ArgumentParser(
        description='Build the per-weekday train services dataset'
    )
    parser.add_argument(
        '--date',
        type=parse_date,
        default=date.today(),
        help='Reference date (YYYY-MM-DD). Defaults to today'
    )
    parser.add_argument(
        '--stations',
        type=Path,
        required=True,
        help='Path to the station reference CSV'
    )
    parser.add_argument(
        '--output',
        type=Path,
        required=True,
        help='Output directory for day_of_week=N partitions'
    )
    parser.add_argument(
        '--services-file',
        type=Path,
        help='Local services archive (.csv or .csv.gz) instead of downloading'
    )

    args = parser.parse_args()

    exporter = TrainServicesExporter(url_template=settings.data.SERVICES_URL_TEMPLATE)

    try:
        stations = load_station_frame(args.stations)
    except DataUnavailable as e:
        logger.error(f"Cannot read stations from {args.stations}: {e.message}")
        return 1

    try:
        if args.services_file:
            logger.info(f"Reading services archive {args.services_file}")
            services = pd.read_csv(args.services_file)
        else:
            services = exporter.download_services(args.date)
    except requests.RequestException as e:
        logger.error(f"Download failed: {e}")
        return 1
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read services archive: {e}")
        return 1

    legs = exporter.build_legs(services, stations, args.date)
    if legs.empty:
        logger.error(f"No legs built for reference date {args.date}")
        return 1

    written = exporter.write_partitions(legs, args.output)
    logger.info(f"Wrote {len(written)} partitions to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
