import asyncio
import hmac
import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
load_dotenv()  # Load .env file before importing settings

from fastapi import FastAPI, BackgroundTasks, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from core.config import settings
from core.containers import TripContainer
from core.rate_limiter import limiter, rate_limit_exceeded_handler, RateLimits
from src.framework.application import QueryBus
from src.trip_bc.exceptions import (
    DataUnavailable,
    InvalidInput,
    TripPlanningError,
    TripPlanningTimeout,
)

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    InvalidInput: 400,
    DataUnavailable: 503,
    TripPlanningTimeout: 504,
}


async def trip_planning_error_handler(request: Request, exc: TripPlanningError) -> JSONResponse:
    """Map planner errors to HTTP status codes with a stable JSON body."""
    status_code = next(
        (status for exc_type, status in ERROR_STATUS.items() if isinstance(exc, exc_type)),
        500,
    )
    return JSONResponse(
        status_code=status_code,
        content={"error": exc.code, "message": exc.message},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the trip data store on startup and close it on shutdown.

    A store that fails to open leaves the app running with /health at 503
    until /admin/reload-data succeeds.
    """
    store = app.state.data_store
    logger.info("Loading trip reference data...")
    loop = asyncio.get_event_loop()
    try:
        await loop.run_in_executor(None, store.open)
        logger.info("Trip reference data loaded successfully")
    except DataUnavailable as e:
        logger.error(f"Trip reference data could not be loaded: {e.message}")

    yield

    store.close()


def create_app(container: Optional[TripContainer] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    # Settings validation is done automatically in core/config.py on import
    container = container or TripContainer()

    app = FastAPI(
        title="RailTrip API",
        description="Same-day multi-leg train trip planner for the Netherlands",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.container = container
    app.state.data_store = container.trip_data_store()
    app.state.query_bus = QueryBus(container)

    # CORS middleware - Public API, no credentials needed
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_exception_handler(TripPlanningError, trip_planning_error_handler)

    # Register routers
    from adapters.http.api.trips.routers import trip_router
    app.include_router(trip_router, prefix="/api/v1")

    @app.get("/health")
    @limiter.limit(RateLimits.HEALTH)
    async def health_check(request: Request):
        """Health check endpoint.

        Returns 503 until the station reference data is loaded.
        """
        store = request.app.state.data_store

        if not store.is_loaded:
            return JSONResponse(
                status_code=503,
                content={
                    "status": "loading",
                    "message": "Trip reference data is not loaded"
                }
            )

        return {
            "status": "healthy",
            "trip_data_store": {
                "loaded": True,
                "load_time_seconds": round(store.load_time_seconds, 1),
                "stats": store.stats
            }
        }

    @app.post("/admin/reload-data")
    @limiter.limit(RateLimits.ADMIN_RELOAD)
    async def reload_data(
        request: Request,
        background_tasks: BackgroundTasks,
        x_admin_token: str = Header(None, alias="X-Admin-Token")
    ):
        """Reload station data and drop cached leg partitions.

        The reload runs in a background task. Requests already planning
        keep the data they started with.

        Requires X-Admin-Token header for authentication.
        """
        # Constant-time comparison
        if not x_admin_token or not settings.ADMIN_TOKEN:
            raise HTTPException(status_code=401, detail="Unauthorized: Missing admin token")
        if not hmac.compare_digest(settings.ADMIN_TOKEN, x_admin_token):
            raise HTTPException(status_code=401, detail="Unauthorized: Invalid admin token")

        store = request.app.state.data_store

        def do_reload():
            try:
                store.reload()
            except DataUnavailable as e:
                logger.error(f"Trip data reload failed: {e.message}")

        background_tasks.add_task(do_reload)

        return {
            "status": "reload_initiated",
            "message": "Trip data reload started in background"
        }

    return app


app = create_app()
