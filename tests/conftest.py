"""Pytest configuration and fixtures."""

from datetime import datetime

import pandas as pd
import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from core.containers import TripContainer
from core.rate_limiter import limiter
from src.trip_bc.routing.trip_data_store import TripDataStore
from src.trip_bc.service_leg.domain.entities import ServiceLeg
from src.trip_bc.service_leg.infrastructure.services.train_services_exporter import TrainServicesExporter
from src.trip_bc.station.domain.entities import Station
from src.trip_bc.station.domain.station_directory import StationDirectory

SERVICE_DAY = datetime(2024, 5, 11)  # a Saturday, day_of_week=6

STATION_ROWS = [
    # code, name, lat, lon, municipality, province, monuments
    ("A", "Amsterdam Centraal", 52.3791, 4.9003, "GM0363", "PV27", 1),
    ("B", "Haarlem", 52.3874, 4.6383, "GM0392", "PV27", 2),
    ("C", "Utrecht Centraal", 52.0894, 5.1100, "GM0344", "PV26", 3),
    ("C2", "Utrecht Overvecht", 52.1063, 5.1332, "GM0344", "PV26", 4),
    ("D", "Leiden Centraal", 52.1664, 4.4817, "GM0546", "PV28", 5),
    ("E", "Amersfoort Centraal", 52.1533, 5.3737, "GM0307", "PV26", 0),
]


def at(hhmm: str) -> datetime:
    """Timestamp on the service day, e.g. at("08:30")."""
    hour, minute = hhmm.split(":")
    return SERVICE_DAY.replace(hour=int(hour), minute=int(minute))


@pytest.fixture
def station_list():
    return [
        Station(code, name, lat, lon, muni, prov, monuments)
        for code, name, lat, lon, muni, prov, monuments in STATION_ROWS
    ]


@pytest.fixture
def stations(station_list):
    """StationDirectory with six stations; C and C2 share a municipality."""
    return StationDirectory.from_stations(station_list)


@pytest.fixture
def make_leg(stations):
    """Build a ServiceLeg between two known stations from HH:MM strings."""

    def _make_leg(from_station: str, to_station: str, departure: str, arrival: str) -> ServiceLeg:
        origin = stations[from_station]
        target = stations[to_station]
        return ServiceLeg(
            from_station=from_station,
            to_station=to_station,
            departure=at(departure),
            arrival=at(arrival),
            from_municipality=origin.municipality_id,
            to_municipality=target.municipality_id,
            from_province=origin.province_id,
            to_province=target.province_id,
        )

    return _make_leg


@pytest.fixture
def scenario_legs(make_leg):
    """A small network where A -> B -> C and A -> D -> C both reach C at 09:xx.

    B -> C departs 08:35, which shares the 08:30 bucket with the 08:30
    arrival at B, so it connects with a zero-hour layover.
    """
    return [
        make_leg("A", "B", "08:00", "08:30"),
        make_leg("B", "C", "08:35", "09:05"),
        make_leg("A", "D", "08:00", "08:20"),
        make_leg("D", "C", "08:20", "09:10"),
        make_leg("A", "E", "10:00", "10:30"),
    ]


@pytest.fixture
def station_csv_text():
    header = "station_code,station_name,lat,lon,municipality_sk,province_sk,number_of_monuments"
    rows = [
        f"{code},{name},{lat},{lon},{muni},{prov},{monuments}"
        for code, name, lat, lon, muni, prov, monuments in STATION_ROWS
    ]
    return "\n".join([header] + rows) + "\n"


def legs_frame(legs, day_of_week: int) -> pd.DataFrame:
    """Leg records in the column layout written by the provisioning job."""
    return pd.DataFrame({
        "day_of_week": [day_of_week] * len(legs),
        "service_id": [f"S{i}" for i in range(len(legs))],
        "departure_time_tb": pd.to_datetime([leg.departure for leg in legs]),
        "from_station_code": [leg.from_station for leg in legs],
        "from_municipality_sk": [leg.from_municipality for leg in legs],
        "from_province_sk": [leg.from_province for leg in legs],
        "to_station_code": [leg.to_station for leg in legs],
        "arrival_time_tb": pd.to_datetime([leg.arrival for leg in legs]),
        "to_municipality_sk": [leg.to_municipality for leg in legs],
        "to_province_sk": [leg.to_province for leg in legs],
    })


@pytest.fixture
def data_files(tmp_path, station_csv_text, scenario_legs):
    """Station CSV plus a Saturday leg partition on disk."""
    stations_path = tmp_path / "stations.csv"
    stations_path.write_text(station_csv_text, encoding="utf-8")

    services_dir = tmp_path / "train_services"
    TrainServicesExporter().write_partitions(legs_frame(scenario_legs, 6), services_dir)
    return stations_path, services_dir


@pytest.fixture
def data_store(data_files):
    stations_path, services_dir = data_files
    return TripDataStore(stations_path, services_dir)


@pytest.fixture
def client(data_store):
    """Create a test client for the FastAPI app backed by fixture data."""
    from app import create_app

    container = TripContainer()
    container.trip_data_store.override(providers.Object(data_store))

    limiter.enabled = False
    try:
        with TestClient(create_app(container)) as c:
            yield c
    finally:
        limiter.enabled = True
        container.trip_data_store.reset_override()


@pytest.fixture
def api_base_url():
    """Base URL for trip API endpoints."""
    return "/api/v1/trips"
