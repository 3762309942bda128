"""
Health Routes - Liveness and miss-check scheduler status
"""
from fastapi import APIRouter

from plan91 import __version__
from plan91.services.scheduler import get_scheduler

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Report the API version and whether the daily miss check is scheduled"""
    scheduler = get_scheduler()
    return {
        "status": "ok",
        "version": __version__,
        "scheduler_running": scheduler is not None and scheduler.running,
    }
