"""
Pydantic schemas and per-operation validation for student records.

`validate_create` and `validate_update` are the explicit validation step
the routes run before touching the store. Both raise `BadRequest` with
one entry per failing field.
"""

from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, ValidationError, field_serializer, field_validator
from pydantic_core import PydanticCustomError

from app.errors import BadRequest

MIN_LENGTHS = {
    "name": (2, "Name must be at least 2 characters"),
    "student_id": (5, "Student ID must be at least 5 characters"),
    "address": (5, "Address must be at least 5 characters"),
}

REQUIRED_FIELDS = ("name", "student_id", "address")


def _check_min_length(field: str, value):
    if value is None:
        raise PydanticCustomError("required", "{field} cannot be null", {"field": field})
    minimum, message = MIN_LENGTHS[field]
    if len(value) < minimum:
        raise PydanticCustomError("too_short", message)
    return value


def _keep_email_as_given(value, handler):
    # EmailStr normalizes (lowercased domain); store what the caller sent
    handler(value)
    return value


class StudentCreate(BaseModel):
    """Body of POST /api/students."""
    name: str
    student_id: str
    address: str
    email: Optional[EmailStr] = None
    phone: Optional[str] = None

    @field_validator("name", "student_id", "address")
    @classmethod
    def check_min_length(cls, value, info):
        return _check_min_length(info.field_name, value)

    @field_validator("email", mode="wrap")
    @classmethod
    def check_email(cls, value, handler):
        return _keep_email_as_given(value, handler)


class StudentUpdate(BaseModel):
    """
    Body of PUT /api/students/{id}.

    Every field is optional. Required fields that are provided must still
    satisfy their rules and may not be null; email and phone may be null
    to clear them.
    """
    name: Optional[str] = None
    student_id: Optional[str] = None
    address: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None

    # Validators only run on explicitly provided values
    @field_validator("name", "student_id", "address")
    @classmethod
    def check_min_length(cls, value, info):
        return _check_min_length(info.field_name, value)

    @field_validator("email", mode="wrap")
    @classmethod
    def check_email(cls, value, handler):
        return _keep_email_as_given(value, handler)


class StudentRead(BaseModel):
    """A persisted student record as returned by the API."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    student_id: str
    address: str
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at", when_used="json")
    def serialize_utc(self, value: datetime) -> str:
        """Timestamps are stored as naive UTC; emit them with an explicit offset."""
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()


def format_validation_errors(exc: ValidationError) -> List[dict]:
    """Flatten a pydantic ValidationError into [{field, message}] entries."""
    details = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"]) or "body"
        details.append({"field": field, "message": error["msg"]})
    return details


def _require_object(payload: Any):
    if not isinstance(payload, dict):
        raise BadRequest("Request body must be a JSON object",
                         details=[{"field": "body", "message": "Expected a JSON object"}])


def validate_create(payload: Any) -> StudentCreate:
    """Validate a create body. Unknown keys (id, timestamps, ...) are ignored."""
    _require_object(payload)
    try:
        return StudentCreate.model_validate(payload)
    except ValidationError as exc:
        raise BadRequest("Validation failed", details=format_validation_errors(exc))


def validate_update(payload: Any) -> dict:
    """Validate a partial update body and return only the provided fields."""
    _require_object(payload)
    try:
        update = StudentUpdate.model_validate(payload)
    except ValidationError as exc:
        raise BadRequest("Validation failed", details=format_validation_errors(exc))
    return update.model_dump(exclude_unset=True)
