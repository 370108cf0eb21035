"""Unit tests for the caller-owned trip data session."""

import threading

import pytest

from src.trip_bc.exceptions import DataUnavailable
from src.trip_bc.routing.trip_data_store import TripDataStore


class CountingReader:
    """Leg reader that records which weekdays were read."""

    def __init__(self, legs):
        self.legs = legs
        self.calls = []
        self._lock = threading.Lock()

    def read(self, day_of_week):
        with self._lock:
            self.calls.append(day_of_week)
        if day_of_week != 6:
            raise DataUnavailable(f"No timetable data for day_of_week={day_of_week}")
        return list(self.legs)


class TestTripDataStoreLifecycle:
    """Tests for open/close/reload."""

    def test_not_loaded_until_opened(self, data_store):
        """Stations are unavailable before open()."""
        assert not data_store.is_loaded
        with pytest.raises(DataUnavailable):
            data_store.stations

    def test_open_loads_stations(self, data_store):
        """open() loads the station directory and records stats."""
        data_store.open()

        assert data_store.is_loaded
        assert len(data_store.stations) == 6
        assert data_store.stats["stations"] == 6
        assert data_store.load_time_seconds >= 0

    def test_context_manager_closes(self, data_store):
        """Leaving the with-block tears the session down."""
        with data_store as store:
            assert store.stations["A"].name == "Amsterdam Centraal"
        assert not data_store.is_loaded

    def test_missing_station_file(self, tmp_path):
        """A missing station file cannot be opened."""
        store = TripDataStore(tmp_path / "missing.csv", tmp_path)
        with pytest.raises(DataUnavailable):
            store.open()
        assert not store.is_loaded

    def test_reload_picks_up_new_stations(self, data_files, station_csv_text):
        """reload() re-reads the station file."""
        stations_path, services_dir = data_files
        store = TripDataStore(stations_path, services_dir).open()

        stations_path.write_text(
            station_csv_text + "F,Gouda,52.0175,4.7046,GM0513,PV28,7\n", encoding="utf-8"
        )
        store.reload()

        assert "F" in store.stations
        assert len(store.stations) == 7


class TestTripDataStoreLegs:
    """Tests for per-weekday leg caching."""

    def test_legs_read_from_partition(self, data_store, scenario_legs):
        """Legs come back from the parquet partition unchanged."""
        legs = data_store.open().legs_for(6)

        assert len(legs) == len(scenario_legs)
        assert [(l.from_station, l.to_station, l.departure, l.arrival) for l in legs] == [
            (l.from_station, l.to_station, l.departure, l.arrival) for l in scenario_legs
        ]

    def test_legs_cached_per_day(self, data_files, scenario_legs):
        """A weekday is read once, however many times it is requested."""
        stations_path, services_dir = data_files
        reader = CountingReader(scenario_legs)
        store = TripDataStore(stations_path, services_dir, leg_reader=reader).open()

        first = store.legs_for(6)
        second = store.legs_for(6)

        assert first is second
        assert reader.calls == [6]
        assert store.stats["legs_day_6"] == len(scenario_legs)

    def test_concurrent_first_reads(self, data_files, scenario_legs):
        """Threads racing on a cold weekday trigger a single read."""
        stations_path, services_dir = data_files
        reader = CountingReader(scenario_legs)
        store = TripDataStore(stations_path, services_dir, leg_reader=reader).open()

        threads = [threading.Thread(target=store.legs_for, args=(6,)) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert reader.calls == [6]

    def test_missing_day(self, data_store):
        """A weekday with no partition raises DataUnavailable."""
        with pytest.raises(DataUnavailable):
            data_store.open().legs_for(1)

    def test_reload_drops_cached_partitions(self, data_files, scenario_legs):
        """After reload() partitions are read again."""
        stations_path, services_dir = data_files
        reader = CountingReader(scenario_legs)
        store = TripDataStore(stations_path, services_dir, leg_reader=reader).open()

        store.legs_for(6)
        store.reload()
        store.legs_for(6)

        assert reader.calls == [6, 6]
