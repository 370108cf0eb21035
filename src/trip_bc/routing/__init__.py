"""Same-day multi-leg trip planning.

Pipeline: ServiceGraph -> PathExpander -> deduplicate -> rank.

- TripPlanner: runs the pipeline for one TripQuery under a time budget
- TripDataStore: caller-owned session holding stations and leg partitions
"""

from .path import Path
from .path_expander import PathExpander, TerminationScope
from .ranker import RankedTrip, rank
from .deduplicator import deduplicate
from .service_graph import ServiceGraph
from .trip_query import TripQuery
from .trip_planner import TripPlanner
from .trip_data_store import TripDataStore

__all__ = [
    "Path",
    "PathExpander",
    "TerminationScope",
    "RankedTrip",
    "rank",
    "deduplicate",
    "ServiceGraph",
    "TripQuery",
    "TripPlanner",
    "TripDataStore",
]
