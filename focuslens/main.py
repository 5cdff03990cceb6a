"""
FastAPI application exposing the fragmentation engine.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from focuslens.config import settings
from focuslens.features.fragmentation import fragmentation_router
from focuslens.infrastructure.observability.logging import get_logger, log_request, setup_logging
from focuslens.routes import health

# Setup logging before creating the app
setup_logging(log_level=settings.LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log application startup and shutdown."""
    logger.info(
        "Application starting",
        environment=settings.environment,
        debug=settings.debug,
        trend_config=settings.get_trend_config(),
    )
    yield
    logger.info("Application shutting down")


app = FastAPI(
    title="FocusLens",
    description="Cognitive fragmentation scoring, anomaly detection, and trends",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(health.router)
app.include_router(fragmentation_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
