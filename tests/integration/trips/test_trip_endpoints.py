"""API tests for the trip endpoints, backed by fixture data written to tmp_path."""

from dependency_injector import providers
from fastapi.testclient import TestClient

from core.config import settings
from core.containers import TripContainer
from core.rate_limiter import limiter
from src.trip_bc.routing.trip_data_store import TripDataStore
from src.trip_bc.routing.trip_planner import TripPlanner

PLAN_PARAMS = {
    "day": "Saturday",
    "from": "A",
    "departure": "08:00",
    "to": "C",
    "arrival_hour": 9,
    "layover_hours": 0,
}


def plan_params(**overrides):
    params = dict(PLAN_PARAMS)
    params.update(overrides)
    return params


class SteppingClock:
    def __init__(self, step: float):
        self.step = step
        self.now = 0.0

    def __call__(self) -> float:
        self.now += self.step
        return self.now


def make_client(store: TripDataStore, planner_provider=None) -> TestClient:
    from app import create_app

    container = TripContainer()
    container.trip_data_store.override(providers.Object(store))
    if planner_provider is not None:
        container.trip_planner.override(planner_provider)
    return TestClient(create_app(container))


class TestHealth:
    """Tests for /health."""

    def test_healthy_after_startup(self, client):
        """The store is opened by the lifespan and reported as loaded."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["trip_data_store"]["stats"]["stations"] == 6

    def test_unavailable_without_station_file(self, tmp_path):
        """A store that failed to open reports 503."""
        store = TripDataStore(tmp_path / "missing.csv", tmp_path)
        limiter.enabled = False
        try:
            with make_client(store) as c:
                response = c.get("/health")
        finally:
            limiter.enabled = True
        assert response.status_code == 503
        assert response.json()["status"] == "loading"


class TestStationsEndpoint:
    """Tests for GET /trips/stations."""

    def test_lists_stations_by_name(self, client, api_base_url):
        """Stations come back ordered by name with their keys."""
        response = client.get(f"{api_base_url}/stations")
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 6
        assert data[0]["code"] == "E"
        assert data[0]["name"] == "Amersfoort Centraal"
        assert data[0]["municipality"] == "GM0307"
        assert set(data[0]) >= {"code", "name", "lat", "lon", "municipality", "province"}


class TestTripPlannerEndpoint:
    """Tests for GET /trips/trip-planner."""

    def test_returns_ranked_trips(self, client, api_base_url):
        """The most diverse trip comes first with an overlap of zero."""
        response = client.get(f"{api_base_url}/trip-planner", params=PLAN_PARAMS)
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert [[s["code"] for s in t["stops"]] for t in data["trips"]] == [
            ["A", "D", "C"],
            ["A", "B", "C"],
        ]
        assert [t["overlap_score"] for t in data["trips"]] == [0, 2]

    def test_trip_details(self, client, api_base_url):
        """Each trip has stop coordinates, ISO timestamps and travel time."""
        response = client.get(f"{api_base_url}/trip-planner", params=PLAN_PARAMS)
        trip = response.json()["trips"][1]

        assert trip["stops"][0] == {
            "code": "A",
            "name": "Amsterdam Centraal",
            "lat": 52.3791,
            "lon": 4.9003,
        }
        assert trip["departure"] == "2024-05-11T08:00:00"
        assert trip["arrival"] == "2024-05-11T09:05:00"
        assert trip["travel_minutes"] == 60
        assert trip["legs"][1] == {
            "origin": "B",
            "destination": "C",
            "departure": "2024-05-11T08:35:00",
            "arrival": "2024-05-11T09:05:00",
        }

    def test_numeric_day(self, client, api_base_url):
        """The day may be given as an ISO weekday number."""
        response = client.get(f"{api_base_url}/trip-planner", params=plan_params(day="6"))
        assert response.status_code == 200
        assert len(response.json()["trips"]) == 2

    def test_station_codes_are_sanitized(self, client, api_base_url):
        """Whitespace and unsafe characters around station codes are removed."""
        response = client.get(f"{api_base_url}/trip-planner", params=plan_params(**{"from": " <A> "}))
        assert response.status_code == 200
        assert len(response.json()["trips"]) == 2

    def test_no_route_is_success(self, client, api_base_url):
        """No matching departure is an empty, successful result."""
        response = client.get(f"{api_base_url}/trip-planner", params=plan_params(departure="07:00"))
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["trips"] == []

    def test_requires_from_param(self, client, api_base_url):
        """Should return 422 when 'from' parameter is missing."""
        params = plan_params()
        del params["from"]
        response = client.get(f"{api_base_url}/trip-planner", params=params)
        assert response.status_code == 422


class TestTripPlannerErrors:
    """Tests for the error mapping of /trips/trip-planner."""

    def test_bad_departure_format(self, client, api_base_url):
        """A departure that is not HH:MM is a 400."""
        response = client.get(f"{api_base_url}/trip-planner", params=plan_params(departure="8h"))
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_INPUT"

    def test_out_of_range_departure(self, client, api_base_url):
        """Minutes above 59 are a 400."""
        response = client.get(f"{api_base_url}/trip-planner", params=plan_params(departure="08:60"))
        assert response.status_code == 400

    def test_unknown_day_name(self, client, api_base_url):
        """An unknown day name is a 400."""
        response = client.get(f"{api_base_url}/trip-planner", params=plan_params(day="Funday"))
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_INPUT"

    def test_unknown_station(self, client, api_base_url):
        """An unknown station code is a 400."""
        response = client.get(f"{api_base_url}/trip-planner", params=plan_params(to="NOPE"))
        assert response.status_code == 400
        assert "destination" in response.json()["message"]

    def test_arrival_hour_out_of_range(self, client, api_base_url):
        """arrival_hour above 23 is a 400."""
        response = client.get(f"{api_base_url}/trip-planner", params=plan_params(arrival_hour=25))
        assert response.status_code == 400

    def test_missing_weekday_data(self, client, api_base_url, data_files):
        """A weekday without a partition is a 503 that hides file paths."""
        response = client.get(f"{api_base_url}/trip-planner", params=plan_params(day="Monday"))
        assert response.status_code == 503
        data = response.json()
        assert data["error"] == "DATA_UNAVAILABLE"
        assert str(data_files[1]) not in data["message"]

    def test_timeout(self, data_store, api_base_url):
        """Running out of planning time is a 504 asking for a longer layover."""
        planner = providers.Factory(TripPlanner, timeout_ms=1000, clock=SteppingClock(step=5.0))
        limiter.enabled = False
        try:
            with make_client(data_store, planner) as c:
                response = c.get(f"{api_base_url}/trip-planner", params=PLAN_PARAMS)
        finally:
            limiter.enabled = True
        assert response.status_code == 504
        data = response.json()
        assert data["error"] == "TRIP_PLANNING_TIMEOUT"
        assert "increase the layover time" in data["message"]


class TestAdminReload:
    """Tests for POST /admin/reload-data."""

    def test_requires_token(self, client):
        """Requests without a token are rejected."""
        response = client.post("/admin/reload-data")
        assert response.status_code == 401

    def test_rejects_wrong_token(self, client, monkeypatch):
        """A wrong token is rejected."""
        monkeypatch.setattr(settings, "ADMIN_TOKEN", "s" * 32)
        response = client.post("/admin/reload-data", headers={"X-Admin-Token": "x" * 32})
        assert response.status_code == 401

    def test_reload_with_token(self, client, monkeypatch):
        """A valid token starts a reload."""
        monkeypatch.setattr(settings, "ADMIN_TOKEN", "s" * 32)
        response = client.post("/admin/reload-data", headers={"X-Admin-Token": "s" * 32})
        assert response.status_code == 200
        assert response.json()["status"] == "reload_initiated"
        assert client.get("/health").status_code == 200
