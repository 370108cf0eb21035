"""API schemas for trip endpoints."""

from .trip_schemas import (
    StationResponse,
    TripStopResponse,
    TripLegResponse,
    TripResponse,
    TripPlannerResponse,
)

__all__ = [
    "StationResponse",
    "TripStopResponse",
    "TripLegResponse",
    "TripResponse",
    "TripPlannerResponse",
]
