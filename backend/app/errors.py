"""
Error taxonomy for the student records API.

Every error carries the HTTP status it maps to and renders itself as the
JSON body returned to the caller. Validation failures additionally carry
per-field details.
"""

from typing import List, Optional


class StudentError(Exception):
    """Base class for errors surfaced to API callers."""

    http_status = 500

    def __init__(self, message: str, details: Optional[List[dict]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or []

    def to_response(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class BadRequest(StudentError):
    """Malformed id or failed field validation."""
    http_status = 400


class NotFound(StudentError):
    """No record with the requested id."""
    http_status = 404


class Conflict(StudentError):
    """Duplicate business key."""
    http_status = 409


class InternalError(StudentError):
    """Unexpected store or transport fault. The message is always generic."""
    http_status = 500
