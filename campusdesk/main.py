import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from campusdesk.core.config import settings
from campusdesk.core.database import init_models
from campusdesk.api.v1 import api_router
from campusdesk.middleware.monitoring import (
    MonitoringMiddleware,
    configure_structured_logging,
)
from campusdesk.jobs.reminder_batch import (
    setup_scheduler,
    shutdown_scheduler,
    get_scheduler_status,
)
from campusdesk.services.metrics_service import metrics_collector

# Configure structured logging
if settings.ENABLE_STRUCTURED_LOGGING:
    configure_structured_logging(
        log_level="DEBUG" if settings.DEBUG else "INFO",
        json_format=not settings.DEBUG  # Use JSON in production, plain text in debug
    )
else:
    logging.basicConfig(
        level=logging.INFO if not settings.DEBUG else logging.DEBUG,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Creates tables on startup and runs the job scheduler while the app is up.
    """
    # Startup
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    await init_models()

    if settings.SCHEDULER_ENABLED:
        scheduler = setup_scheduler()
        scheduler.start()
        logger.info("Job scheduler started")
    else:
        logger.info("Job scheduler disabled")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.APP_NAME}")
    shutdown_scheduler()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="College Complaint Management API",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request id, timing and request metrics
app.add_middleware(MonitoringMiddleware)

# Include API router
app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health_check():
    """
    Health check endpoint.

    Returns application health status including scheduler jobs and the
    last computed SLA statistics.
    """
    return {
        "status": "healthy",
        "scheduler": get_scheduler_status(),
        "metrics": metrics_collector.get_summary()
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "campusdesk.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
