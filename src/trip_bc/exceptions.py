"""Errors raised by the trip planner.

An empty result is not an error: when no trip connects origin and
destination the planner returns an empty list.
"""


class TripPlanningError(Exception):
    """Base error for trip planning."""

    def __init__(self, message: str, code: str = "TRIP_PLANNING_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


class InvalidInput(TripPlanningError, ValueError):
    """A query parameter is out of range or references an unknown station."""

    def __init__(self, message: str = "Invalid trip query"):
        super().__init__(message, code="INVALID_INPUT")


class DataUnavailable(TripPlanningError):
    """Station records or the leg partition for a weekday are missing."""

    def __init__(self, message: str = "Timetable data is not available"):
        super().__init__(message, code="DATA_UNAVAILABLE")


class TripPlanningTimeout(TripPlanningError):
    """The search exceeded its wall-clock budget. No partial result is kept."""

    def __init__(self, message: str = "Unable to plan trip, increase the layover time"):
        super().__init__(message, code="TRIP_PLANNING_TIMEOUT")
