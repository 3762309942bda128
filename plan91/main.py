"""
FastAPI Application Entry Point
"""
from contextlib import asynccontextmanager
import logging
from fastapi import FastAPI
import uvicorn

from plan91 import __version__
from plan91.core.config import settings
from plan91.routes import health, routines
from plan91.services.scheduler import start_scheduler, stop_scheduler

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

# Silence noisy third-party loggers
logging.getLogger('apscheduler.scheduler').setLevel(logging.WARNING)
logging.getLogger('apscheduler.executors').setLevel(logging.WARNING)
logging.getLogger('apscheduler.executors.default').setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI lifespan context manager for startup/shutdown events
    """
    # Startup
    if settings.SCHEDULER_ENABLED:
        try:
            start_scheduler()
            logger.info("✓ Miss check scheduler started")
        except Exception as e:
            logger.warning(f"Could not start scheduler: {e}")

    yield

    # Shutdown
    if settings.SCHEDULER_ENABLED:
        try:
            stop_scheduler()
            logger.info("✓ Miss check scheduler stopped")
        except Exception as e:
            logger.warning(f"Error stopping scheduler: {e}")


# Initialize FastAPI app with lifespan
app = FastAPI(
    title="Plan91 API",
    version=__version__,
    lifespan=lifespan
)

# Register routes
app.include_router(health.router)
app.include_router(routines.router)


def run():
    """Serve the API with uvicorn"""
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
