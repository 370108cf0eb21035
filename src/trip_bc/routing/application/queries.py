from dataclasses import dataclass
from typing import List

from src.framework.application import Query, QueryHandler
from src.trip_bc.routing.ranker import RankedTrip
from src.trip_bc.routing.trip_data_store import TripDataStore
from src.trip_bc.routing.trip_planner import TripPlanner
from src.trip_bc.routing.trip_query import TripQuery
from src.trip_bc.station.domain.entities import Station


@dataclass(frozen=True)
class PlanTripQuery(Query):
    trip: TripQuery


class PlanTripQueryHandler(QueryHandler[PlanTripQuery, List[RankedTrip]]):
    """Plans a trip against the store's datasets."""

    def __init__(self, data_store: TripDataStore, planner: TripPlanner):
        self.data_store = data_store
        self.planner = planner

    def handle(self, query: PlanTripQuery) -> List[RankedTrip]:
        return self.planner.plan(query.trip, self.data_store.stations, self.data_store.legs_for)


@dataclass(frozen=True)
class ListStationsQuery(Query):
    pass


class ListStationsQueryHandler(QueryHandler[ListStationsQuery, List[Station]]):

    def __init__(self, data_store: TripDataStore):
        self.data_store = data_store

    def handle(self, query: ListStationsQuery) -> List[Station]:
        return self.data_store.stations.sorted_by_name()
