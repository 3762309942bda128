"""
Custom Exceptions - Application-specific error types

Two families matter to callers: validation errors mean the input was
wrong, invalid-state errors mean the routine was not in a state that
allows the operation (reload and retry).
"""


class Plan91Exception(Exception):
    """Base exception for all plan91 errors"""
    pass


class RoutineValidationError(Plan91Exception):
    """Raised when an operation receives an illegal argument"""
    pass


class InvalidRecurrenceRuleError(RoutineValidationError):
    """Raised when a recurrence rule cannot be built from the given fields"""
    pass


class DuplicateEntryError(RoutineValidationError):
    """Raised when a completion is recorded twice for the same date"""
    pass


class InvalidRoutineStateError(Plan91Exception):
    """Raised when an operation is not allowed in the current state"""
    pass


class RoutineNotFoundError(Plan91Exception):
    """Raised when a routine cannot be found"""
    pass
