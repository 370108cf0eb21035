from .queries import (
    PlanTripQuery,
    PlanTripQueryHandler,
    ListStationsQuery,
    ListStationsQueryHandler,
)

__all__ = [
    "PlanTripQuery",
    "PlanTripQueryHandler",
    "ListStationsQuery",
    "ListStationsQueryHandler",
]
