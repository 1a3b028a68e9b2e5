"""
Student Store - single-row operations against the students table.

Each function takes the request's session, performs at most one write and
commits it. Missing rows raise NotFound, duplicate business keys raise
Conflict, and any other database fault is rolled back and surfaced as
InternalError so no partial state reaches the caller.
"""

import time
from functools import wraps
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.errors import Conflict, InternalError, NotFound
from app.models.student import Student, utcnow
from app.logging_config import get_logger, log_with_context

logger = get_logger("db")

# Largest value a SQLite or PostgreSQL bigint primary key can hold
MAX_RECORD_ID = 2**63 - 1


def _store_operation(func):
    """Roll back and convert unexpected SQLAlchemy faults into InternalError."""
    @wraps(func)
    def wrapper(db: Session, *args, **kwargs):
        start_time = time.time()
        try:
            result = func(db, *args, **kwargs)
        except SQLAlchemyError as e:
            db.rollback()
            log_with_context(logger, "ERROR",
                "Store operation {} failed: {}".format(func.__name__, e.__class__.__name__),
                exc_info=True)
            raise InternalError("Internal Server Error") from e
        duration_ms = (time.time() - start_time) * 1000
        log_with_context(logger, "DEBUG", "Store operation {} completed".format(func.__name__),
                         extra_data={"duration_ms": round(duration_ms, 2)})
        return result
    return wrapper


@_store_operation
def list_all(db: Session) -> List[Student]:
    """Return every student record, ordered by id."""
    return list(db.scalars(select(Student).order_by(Student.id)))


@_store_operation
def get_by_id(db: Session, record_id: int) -> Student:
    """Fetch one record. Ids beyond the key range cannot exist and are NotFound."""
    if record_id > MAX_RECORD_ID:
        raise NotFound("Student not found")
    student = db.get(Student, record_id)
    if student is None:
        raise NotFound("Student not found")
    return student


@_store_operation
def find_by_student_id(db: Session, student_id: str):
    """Look up a record by its business key; None when absent."""
    return db.scalars(select(Student).where(Student.student_id == student_id)).first()


@_store_operation
def insert(db: Session, fields: dict) -> Student:
    """
    Persist a new record.

    created_at and updated_at get the same timestamp. A duplicate
    student_id is rejected before the write; a concurrent insert that
    slips past that check is caught by the unique constraint.
    """
    if find_by_student_id(db, fields["student_id"]) is not None:
        raise Conflict("Student ID already exists")

    now = utcnow()
    student = Student(**fields, created_at=now, updated_at=now)
    db.add(student)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        if find_by_student_id(db, fields["student_id"]) is not None:
            raise Conflict("Student ID already exists")
        raise
    db.refresh(student)

    log_with_context(logger, "INFO", "Created student {}".format(student.student_id),
                     context={"record_id": student.id, "student_id": student.student_id})
    return student


@_store_operation
def update(db: Session, record_id: int, partial: dict) -> Student:
    """
    Merge `partial` into an existing record and refresh updated_at.

    updated_at never moves backwards, even if the wall clock does.
    """
    student = get_by_id(db, record_id)

    for field, value in partial.items():
        setattr(student, field, value)

    now = utcnow()
    student.updated_at = max(now, student.updated_at) if student.updated_at else now

    db.commit()
    db.refresh(student)

    log_with_context(logger, "INFO", "Updated student {}".format(student.student_id),
                     context={"record_id": student.id, "student_id": student.student_id},
                     extra_data={"fields": sorted(partial)})
    return student


@_store_operation
def delete_by_id(db: Session, record_id: int) -> None:
    student = get_by_id(db, record_id)
    # Attributes of a deleted row are unavailable once committed
    business_key = student.student_id
    db.delete(student)
    db.commit()

    log_with_context(logger, "INFO", "Deleted student {}".format(business_key),
                     context={"record_id": record_id, "student_id": business_key})
