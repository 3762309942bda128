"""
Routines Repository - Centralized storage access layer
In-memory store for routines and their entries

Routines are stored and returned as copies, so callers must save after
mutating. `routine_lock` serializes writers of a single routine.
"""
from contextlib import contextmanager
from datetime import date
from typing import Dict, Iterator, List, Optional
from uuid import UUID
import logging
import threading

from plan91.core.exceptions import DuplicateEntryError, RoutineNotFoundError
from plan91.models.entry import Entry
from plan91.models.routine import Routine, RoutineStatus

logger = logging.getLogger(__name__)

_store_lock = threading.RLock()
_routines: Dict[UUID, Routine] = {}
_entries: Dict[UUID, List[Entry]] = {}
_routine_locks: Dict[UUID, threading.Lock] = {}


@contextmanager
def routine_lock(routine_id: UUID) -> Iterator[None]:
    """Hold the write lock for one routine"""
    with _store_lock:
        lock = _routine_locks.setdefault(routine_id, threading.Lock())
    with lock:
        yield


# ============================================================================
# ROUTINES
# ============================================================================

def save_routine(routine: Routine) -> Routine:
    """
    Insert or replace a routine

    Args:
        routine: The routine to store

    Returns:
        A copy of the stored routine
    """
    with _store_lock:
        _routines[routine.id] = routine.model_copy(deep=True)
        _entries.setdefault(routine.id, [])
    return routine.model_copy(deep=True)


def get_routine(routine_id: UUID) -> Routine:
    """
    Get a single routine by ID

    Raises:
        RoutineNotFoundError: If no routine has that ID
    """
    with _store_lock:
        routine = _routines.get(routine_id)
        if routine is None:
            raise RoutineNotFoundError(f"Routine not found: {routine_id}")
        return routine.model_copy(deep=True)


def list_routines(status: Optional[RoutineStatus] = None,
                  practitioner_id: Optional[str] = None) -> List[Routine]:
    """
    List routines, optionally filtered by status and owner

    Returns:
        Routines ordered by start date
    """
    with _store_lock:
        routines = list(_routines.values())

    if status is not None:
        routines = [r for r in routines if r.status == status]
    if practitioner_id is not None:
        routines = [r for r in routines if r.practitioner_id == practitioner_id]

    return [r.model_copy(deep=True) for r in sorted(routines, key=lambda r: (r.start_date, r.created_at))]


def delete_routine(routine_id: UUID) -> Routine:
    """
    Delete a routine and its entries

    Raises:
        RoutineNotFoundError: If no routine has that ID
    """
    with _store_lock:
        routine = _routines.pop(routine_id, None)
        if routine is None:
            raise RoutineNotFoundError(f"Routine not found: {routine_id}")
        _entries.pop(routine_id, None)
        _routine_locks.pop(routine_id, None)
    logger.info(f"Deleted routine {routine_id}")
    return routine


# ============================================================================
# ENTRIES
# ============================================================================

def create_entry(entry: Entry) -> Entry:
    """
    Append an entry for an existing routine

    Raises:
        RoutineNotFoundError: If the routine does not exist
        DuplicateEntryError: If the routine already has an entry on that date
    """
    with _store_lock:
        if entry.routine_id not in _routines:
            raise RoutineNotFoundError(f"Routine not found: {entry.routine_id}")
        entries = _entries.setdefault(entry.routine_id, [])
        if any(e.date == entry.date for e in entries):
            raise DuplicateEntryError(f"Entry already exists for {entry.date}")
        entries.append(entry)
    return entry


def get_entries_for_routine(routine_id: UUID,
                            start: Optional[date] = None,
                            end: Optional[date] = None) -> List[Entry]:
    """
    Get a routine's entries ordered by date, optionally within [start, end]
    """
    with _store_lock:
        entries = list(_entries.get(routine_id, []))

    if start is not None:
        entries = [e for e in entries if e.date >= start]
    if end is not None:
        entries = [e for e in entries if e.date <= end]
    return sorted(entries, key=lambda e: e.date)


def get_entry_for_date(routine_id: UUID, day: date) -> Optional[Entry]:
    with _store_lock:
        for entry in _entries.get(routine_id, []):
            if entry.date == day:
                return entry
    return None


def clear() -> None:
    """Drop everything (tests and local resets)"""
    with _store_lock:
        _routines.clear()
        _entries.clear()
        _routine_locks.clear()
