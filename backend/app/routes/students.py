"""
Student API routes - CRUD endpoints over the students table.

Provides endpoints for:
- Listing all students
- Viewing one student
- Creating, updating and deleting students

Validation always runs before the store is touched: the path id first,
then the request body.
"""

import re
import time
from typing import Any, List

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.errors import BadRequest
from app.schemas.student import StudentRead, validate_create, validate_update
from app.services import student_store
from app.logging_config import get_logger, log_with_context

router = APIRouter(prefix="/api/students")
logger = get_logger("http")

_ID_PATTERN = re.compile(r"[0-9]+")


def parse_record_id(raw: str) -> int:
    """Parse a path id; anything but a positive integer is a BadRequest."""
    if not _ID_PATTERN.fullmatch(raw or "") or int(raw) <= 0:
        raise BadRequest("Invalid ID format")
    return int(raw)


@router.get("", response_model=List[StudentRead])
def list_students(db: Session = Depends(get_db)):
    """List every student record."""
    start_time = time.time()
    students = student_store.list_all(db)

    duration_ms = (time.time() - start_time) * 1000
    log_with_context(logger, "INFO", "Listed {} students".format(len(students)),
                     extra_data={"duration_ms": round(duration_ms, 2)})
    return students


@router.get("/{record_id}", response_model=StudentRead)
def get_student(record_id: str, db: Session = Depends(get_db)):
    """Get a single student record by id."""
    return student_store.get_by_id(db, parse_record_id(record_id))


@router.post("", response_model=StudentRead, status_code=201)
def create_student(payload: Any = Body(...), db: Session = Depends(get_db)):
    """Create a student. The student_id must not be in use."""
    data = validate_create(payload)
    return student_store.insert(db, data.model_dump())


@router.put("/{record_id}", response_model=StudentRead)
def update_student(record_id: str, payload: Any = Body(...), db: Session = Depends(get_db)):
    """
    Partially update a student.

    student_id is immutable: the body may repeat the current value
    (edit forms send it back) but may not change it.
    """
    student_pk = parse_record_id(record_id)
    partial = validate_update(payload)

    existing = student_store.get_by_id(db, student_pk)
    if "student_id" in partial:
        if partial["student_id"] != existing.student_id:
            raise BadRequest("Validation failed", details=[
                {"field": "student_id", "message": "Student ID cannot be changed"}
            ])
        del partial["student_id"]

    return student_store.update(db, student_pk, partial)


@router.delete("/{record_id}")
def delete_student(record_id: str, db: Session = Depends(get_db)):
    """Permanently delete a student."""
    student_store.delete_by_id(db, parse_record_id(record_id))
    return {"message": "Student deleted successfully"}
