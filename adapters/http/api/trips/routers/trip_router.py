import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from core.rate_limiter import limiter, RateLimits
from adapters.http.api.trips.schemas import (
    StationResponse,
    TripLegResponse,
    TripPlannerResponse,
    TripResponse,
    TripStopResponse,
)
from adapters.http.api.trips.utils.text_utils import parse_departure, sanitize_station_input
from src.framework.application import QueryBus
from src.trip_bc.exceptions import InvalidInput
from src.trip_bc.routing import RankedTrip, TripDataStore, TripQuery
from src.trip_bc.routing.application import ListStationsQuery, PlanTripQuery
from src.trip_bc.routing.trip_query import parse_day_of_week
from src.trip_bc.station.domain.station_directory import StationDirectory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips", tags=["Trip Planner"])


def get_query_bus(request: Request) -> QueryBus:
    return request.app.state.query_bus


def get_data_store(request: Request) -> TripDataStore:
    return request.app.state.data_store


def to_trip_response(trip: RankedTrip, stations: StationDirectory) -> TripResponse:
    stops = []
    for code in trip.stations:
        station = stations[code]
        stops.append(TripStopResponse(
            code=station.code,
            name=station.name,
            lat=station.latitude,
            lon=station.longitude,
        ))

    # time_schedule holds (departure, arrival) per leg
    schedule = trip.time_schedule
    legs = [
        TripLegResponse(
            origin=trip.stations[i],
            destination=trip.stations[i + 1],
            departure=schedule[2 * i].isoformat(),
            arrival=schedule[2 * i + 1].isoformat(),
        )
        for i in range(len(trip.stations) - 1)
    ]

    return TripResponse(
        stops=stops,
        legs=legs,
        departure=schedule[0].isoformat(),
        arrival=schedule[-1].isoformat(),
        travel_minutes=trip.travel_minutes,
        overlap_score=trip.overlap_score,
        monument_score=trip.monument_score,
    )


@router.get("/stations", response_model=List[StationResponse])
@limiter.limit(RateLimits.STATIONS)
def list_stations(
    request: Request,
    query_bus: QueryBus = Depends(get_query_bus),
):
    """List every known station, ordered by name."""
    stations = query_bus.query(ListStationsQuery())
    return [
        StationResponse(
            code=s.code,
            name=s.name,
            lat=s.latitude,
            lon=s.longitude,
            municipality=s.municipality_id,
            province=s.province_id,
            monuments=s.monument_count,
        )
        for s in stations
    ]


@router.get("/trip-planner", response_model=TripPlannerResponse)
@limiter.limit(RateLimits.TRIP_PLANNER)
def plan_trip(
    request: Request,
    day: str = Query(..., description="ISO weekday 1-7 or English day name"),
    from_station: str = Query(..., alias="from", description="Origin station code"),
    departure: str = Query(..., description="Departure time in HH:MM format"),
    to_station: str = Query(..., alias="to", description="Destination station code"),
    arrival_hour: int = Query(..., description="Hour of arrival at the destination (0-23)"),
    layover_hours: int = Query(0, description="Hours spent at each intermediate station"),
    to_municipality: Optional[str] = Query(None, description="Destination municipality key"),
    query_bus: QueryBus = Depends(get_query_bus),
    data_store: TripDataStore = Depends(get_data_store),
):
    """Plan a same-day multi-leg trip.

    Trips leave the origin exactly at `departure`, stop for `layover_hours`
    at every intermediate station and reach the destination during
    `arrival_hour`. Options that visit new municipalities rank first, then
    monument-rich ones, then faster ones.

    **Example requests:**
    ```
    GET /api/v1/trips/trip-planner?day=Saturday&from=ASD&departure=08:00&to=UT&arrival_hour=17&layover_hours=2
    GET /api/v1/trips/trip-planner?day=6&from=ASD&departure=08:00&to=UT&arrival_hour=17
    ```

    Errors: 400 for invalid parameters, 503 when no data is available for
    the day, 504 when planning runs out of time.
    """
    try:
        departure_hour, departure_minute = parse_departure(departure)
    except ValueError as e:
        raise InvalidInput(str(e)) from e

    trip_query = TripQuery(
        day_of_week=parse_day_of_week(day),
        origin_station=sanitize_station_input(from_station),
        departure_hour=departure_hour,
        departure_minute=departure_minute,
        destination_station=sanitize_station_input(to_station),
        arrival_hour=arrival_hour,
        layover_hours=layover_hours,
        destination_municipality=sanitize_station_input(to_municipality) or None,
    )

    trips = query_bus.query(PlanTripQuery(trip=trip_query))
    if not trips:
        return TripPlannerResponse(success=True, message="No trips found", trips=[])

    stations = data_store.stations
    return TripPlannerResponse(
        success=True,
        message=f"Found {len(trips)} trips",
        trips=[to_trip_response(t, stations) for t in trips],
    )
