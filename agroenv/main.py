"""
FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from agroenv.config import settings
from agroenv.infrastructure.geocoder_client import close_geocoder_client
from agroenv.infrastructure.weather_archive_client import close_weather_archive_client
from agroenv.api.rate_limit import limiter
from agroenv.middleware.error_handler import ErrorHandlerMiddleware
from agroenv.api.v1.routers import environment

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the effective configuration on startup and close upstream clients on shutdown."""
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Log level: {settings.log_level}")
    logger.info(f"Upstreams: geocoder={settings.geocoder_base_url}, "
                f"weather={settings.weather_archive_base_url}")
    logger.info(f"Weather window: {settings.weather_history_years} years, "
                f"timeout={settings.http_timeout_seconds}s, attempts={settings.max_retry_attempts}")
    logger.info(f"Rate limit: {settings.rate_limit_requests} requests/minute")

    yield

    # Shutdown
    logger.info("Closing upstream clients")
    await close_geocoder_client()
    await close_weather_archive_client()


# Application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Environmental data API for agricultural planning

    Given a place name, this API resolves its coordinates, summarises five
    years of daily weather and estimates soil composition, streaming each
    metric as soon as it is known.

    ## Features

    - **Incremental results**: Server-Sent Events, one event per metric
    - **Weather history**: mean temperature and humidity, previous-year and
      average annual rainfall from the daily archive
    - **Soil estimate**: pH, nitrogen, phosphorus, potassium and soil type by
      latitude band, adjusted for rainfall and longitude
    - **Snapshot endpoint**: the same record as a single JSON document
    - **Rate Limiting**: Protects the API and its upstreams from abuse
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Per-client request limits on the analysis routes
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Browser dashboards call the stream cross-origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# JSON bodies for errors escaping non-streaming routes
app.add_middleware(ErrorHandlerMiddleware)

# Include routers
app.include_router(environment.router, prefix="/api/v1")


@app.get("/", tags=["health"])
async def root():
    """Liveness probe with service name and version."""
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
    }


@app.get("/health", tags=["health"])
async def health_check():
    """
    Health check endpoint.

    Returns:
        Health status
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
    }
