"""
Mission Errors

Failure taxonomy for the mission lifecycle. Every error carries the HTTP
status the transport layer answers with; the core itself never maps or
swallows them.
"""
from typing import Iterable, Optional


class MissionError(Exception):
    """Base class for mission lifecycle failures."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MissionError):
    """Missing or malformed input - user-correctable."""
    status_code = 400

    def __init__(self, message: str, missing_fields: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.missing_fields = list(missing_fields or [])


class NotAuthorized(MissionError):
    """Caller lacks the required relationship to the mission."""
    status_code = 403


class NotFound(MissionError):
    """Referenced mission or user does not exist."""
    status_code = 404


class InvalidState(MissionError):
    """Operation not permitted in the mission's current state."""
    status_code = 400
