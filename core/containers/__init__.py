from .trip_container import TripContainer

__all__ = ["TripContainer"]
