"""
PG Room Inventory Engine - Main Application Entry Point

Service boundary consumed by the admin console:
- Booking status transitions with concurrency-safe bed accounting
- Full-recompute reconciliation and manual availability overrides
- Listing edit sync of room configurations with a deletion guard
- Opportunistic expiry sweep of finished rentals
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pg_inventory.core.config import get_settings
from pg_inventory.core.exceptions import InventoryError
from pg_inventory.core.logging import setup_logging, get_logger
from pg_inventory.core.metrics import metrics_endpoint
from pg_inventory.api.router import api_router
from pg_inventory.api.middleware import RequestLoggingMiddleware
from pg_inventory.db.session import engine

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown hooks."""
    setup_logging()
    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        sweep_on_request=settings.SWEEP_ON_REQUEST,
    )

    yield

    await engine.dispose()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Room inventory and booking-lifecycle reconciliation for PG listings",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(api_router)


@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError) -> JSONResponse:
    logger.warning(
        "inventory_error",
        error_code=exc.error_code.value,
        message=exc.message,
        details=exc.details,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for Docker and load balancers."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


@app.get("/metrics", tags=["Health"])
def metrics():
    return metrics_endpoint()
