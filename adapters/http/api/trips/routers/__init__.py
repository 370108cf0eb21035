from .trip_router import router as trip_router

__all__ = ["trip_router"]
