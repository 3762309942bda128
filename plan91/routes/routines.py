"""
Routine Routes - Endpoints for routine management
"""
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query

from plan91.core.exceptions import (
    InvalidRoutineStateError,
    RoutineNotFoundError,
    RoutineValidationError,
)
from plan91.models.requests import (
    CompleteEntryRequest,
    RecordMissRequest,
    StartRoutineRequest,
)
from plan91.models.routine import RoutineStatus
from plan91.services.routines import service as routine_service

router = APIRouter(prefix="/routines", tags=["routines"])


def _run(func, *args, **kwargs):
    """Call a service function, mapping domain errors to HTTP errors"""
    try:
        return func(*args, **kwargs)
    except RoutineNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RoutineValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InvalidRoutineStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Unexpected error: {str(e)}")


@router.post("")
async def start_routine(request: StartRoutineRequest):
    """Start a new 91-day routine"""
    return _run(
        routine_service.start_routine,
        request.recurrence,
        start_date=request.start_date,
        target_completions=request.target_completions,
        habit_id=request.habit_id,
        practitioner_id=request.practitioner_id,
    )


@router.get("")
async def list_routines(status: Optional[RoutineStatus] = None, practitioner_id: Optional[str] = None):
    """List routines, optionally filtered by status and owner"""
    return _run(routine_service.list_routines, status=status, practitioner_id=practitioner_id)


@router.get("/date/{day}")
async def get_routines_for_date(day: date, practitioner_id: Optional[str] = None):
    """ACTIVE routines due on a given date"""
    return _run(routine_service.get_routines_for_date, day, practitioner_id)


@router.get("/{routine_id}")
async def get_routine(routine_id: UUID, as_of: Optional[date] = None):
    """Get a routine with its headline progress"""
    return _run(routine_service.get_routine_summary, routine_id, as_of)


@router.delete("/{routine_id}")
async def delete_routine(routine_id: UUID):
    """Delete a routine and its entries"""
    return _run(routine_service.delete_routine, routine_id)


@router.post("/{routine_id}/entries")
async def complete_entry(routine_id: UUID, request: CompleteEntryRequest):
    """Record a completion"""
    return _run(routine_service.complete_entry, routine_id, request.date, request.value, request.notes)


@router.post("/{routine_id}/misses")
async def record_miss(routine_id: UUID, request: RecordMissRequest):
    """Record a missed day"""
    return _run(routine_service.record_miss, routine_id, request.date)


@router.post("/{routine_id}/pause")
async def pause_routine(routine_id: UUID):
    return _run(routine_service.pause_routine, routine_id)


@router.post("/{routine_id}/resume")
async def resume_routine(routine_id: UUID):
    return _run(routine_service.resume_routine, routine_id)


@router.post("/{routine_id}/abandon")
async def abandon_routine(routine_id: UUID):
    return _run(routine_service.abandon_routine, routine_id)


@router.post("/{routine_id}/archive")
async def archive_routine(routine_id: UUID):
    return _run(routine_service.archive_routine, routine_id)


@router.get("/{routine_id}/analytics")
async def get_analytics(routine_id: UUID, as_of: Optional[date] = None):
    """Full progress report"""
    return _run(routine_service.get_routine_analytics, routine_id, as_of)


@router.get("/{routine_id}/calendar")
async def get_calendar(routine_id: UUID, year: int = Query(..., ge=1), month: int = Query(..., ge=1, le=12)):
    """Scheduled days and entries for one month"""
    return _run(routine_service.get_calendar, routine_id, year, month)
