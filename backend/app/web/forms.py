"""
Student form state for the web frontend.

One form serves three modes:
- add: empty, every field editable
- edit: pre-filled, student_id locked
- view: pre-filled, read-only, with a delete action
"""

from enum import Enum
from typing import Dict, Optional

from app.errors import BadRequest
from app.schemas.student import REQUIRED_FIELDS, StudentRead, validate_create, validate_update


class FormMode(str, Enum):
    ADD = "add"
    EDIT = "edit"
    VIEW = "view"


# (field, label, input widget)
FORM_FIELDS = [
    ("name", "Full Name", "text"),
    ("student_id", "Student ID", "text"),
    ("address", "Address", "textarea"),
    ("email", "Email (optional)", "email"),
    ("phone", "Phone (optional)", "text"),
]

TITLES = {
    FormMode.ADD: "Add New Student",
    FormMode.EDIT: "Edit Student",
    FormMode.VIEW: "Student Details",
}


def is_locked(mode: FormMode, field: str) -> bool:
    """Whether a field is rendered disabled and read-only."""
    if mode == FormMode.VIEW:
        return True
    return mode == FormMode.EDIT and field == "student_id"


def empty_values() -> Dict[str, str]:
    return {field: "" for field, _, _ in FORM_FIELDS}


def values_from_student(student: StudentRead) -> Dict[str, str]:
    return {field: getattr(student, field) or "" for field, _, _ in FORM_FIELDS}


def build_payload(mode: FormMode, values: Dict[str, str]) -> dict:
    """
    Turn submitted form values into an API request body.

    Required fields are always sent so empty input fails validation.
    Empty optional fields are omitted on add and sent as null on edit,
    which clears them. Locked fields are never sent.
    """
    payload = {}
    for field, _, _ in FORM_FIELDS:
        if is_locked(mode, field):
            continue
        value = (values.get(field) or "").strip()
        if field in REQUIRED_FIELDS:
            payload[field] = value
        elif value:
            payload[field] = value
        elif mode == FormMode.EDIT:
            payload[field] = None
    return payload


def prevalidate(mode: FormMode, payload: dict) -> Dict[str, str]:
    """Run the API's validation rules locally; returns {field: message}."""
    try:
        if mode == FormMode.ADD:
            validate_create(payload)
        else:
            validate_update(payload)
    except BadRequest as e:
        errors = {}
        for detail in e.details:
            errors.setdefault(detail["field"], detail["message"])
        return errors
    return {}


def form_context(mode: FormMode, values: Dict[str, str], errors: Optional[Dict[str, str]] = None,
                 record_id: Optional[int] = None, message: Optional[str] = None) -> dict:
    """Template context for student_form.html."""
    return {
        "mode": mode.value,
        "title": TITLES[mode],
        "record_id": record_id,
        "message": message,
        "fields": [
            {
                "name": field,
                "label": label,
                "widget": widget,
                "value": values.get(field, ""),
                "locked": is_locked(mode, field),
                # Inline errors only make sense on editable forms
                "error": None if mode == FormMode.VIEW else (errors or {}).get(field),
            }
            for field, label, widget in FORM_FIELDS
        ],
    }
