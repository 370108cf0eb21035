"""Trip planner response schemas."""

from typing import List, Optional
from pydantic import BaseModel


class StationResponse(BaseModel):
    code: str
    name: str
    lat: float
    lon: float
    municipality: str
    province: str
    monuments: int = 0


class TripStopResponse(BaseModel):
    """A station on a planned trip."""
    code: str
    name: str
    lat: float
    lon: float


class TripLegResponse(BaseModel):
    """One train ride between two consecutive trip stops."""
    origin: str
    destination: str
    departure: str  # ISO8601 datetime
    arrival: str    # ISO8601 datetime


class TripResponse(BaseModel):
    stops: List[TripStopResponse]
    legs: List[TripLegResponse]
    departure: str
    arrival: str
    travel_minutes: int
    overlap_score: int
    monument_score: int


class TripPlannerResponse(BaseModel):
    """Response from the trip planner endpoint.

    `trips` is ordered best first. An empty list with success=True means
    no route exists for the requested day and times.
    """
    success: bool
    message: Optional[str] = None
    trips: List[TripResponse] = []
