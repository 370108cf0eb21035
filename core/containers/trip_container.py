from dependency_injector import containers, providers

from core.config import settings
from src.trip_bc.routing.application.queries import (
    ListStationsQueryHandler,
    PlanTripQueryHandler,
)
from src.trip_bc.routing.trip_data_store import TripDataStore
from src.trip_bc.routing.trip_planner import TripPlanner
from src.trip_bc.service_leg.infrastructure.services.leg_partition_reader import LegPartitionReader
from src.trip_bc.station.infrastructure.services.station_csv_loader import StationCsvLoader


class TripContainer(containers.DeclarativeContainer):
    """Dependency injection container for the Trip bounded context.

    Handler naming convention for QueryBus:
    - PlanTripQuery -> plan_trip_query_handler
    - ListStationsQuery -> list_stations_query_handler
    """

    station_loader = providers.Singleton(
        StationCsvLoader,
        max_bytes=settings.data.MAX_STATIONS_FILE_BYTES,
        lat_bounds=(settings.data.LAT_MIN, settings.data.LAT_MAX),
        lon_bounds=(settings.data.LON_MIN, settings.data.LON_MAX),
    )

    leg_reader = providers.Singleton(
        LegPartitionReader,
        services_dir=settings.data.services_path,
    )

    # One data session per process; opened and closed by the app lifespan
    trip_data_store = providers.Singleton(
        TripDataStore,
        stations_path=settings.data.stations_path,
        services_dir=settings.data.services_path,
        station_loader=station_loader,
        leg_reader=leg_reader,
    )

    trip_planner = providers.Factory(
        TripPlanner,
        timeout_ms=settings.planner.TRIP_PLANNING_TIMEOUT_MS,
        max_legs=settings.planner.MAX_LEGS,
        termination_scope=settings.planner.TERMINATION_SCOPE,
        workers=settings.planner.EXPANSION_WORKERS,
    )

    # Query Handlers (named in snake_case for QueryBus convention)
    plan_trip_query_handler = providers.Factory(
        PlanTripQueryHandler,
        data_store=trip_data_store,
        planner=trip_planner,
    )

    list_stations_query_handler = providers.Factory(
        ListStationsQueryHandler,
        data_store=trip_data_store,
    )
