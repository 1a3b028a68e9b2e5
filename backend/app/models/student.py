"""
Student model - the single table of student records.

Each record has an integer surrogate key (`id`) used for addressing and a
business key (`student_id`) that is unique across all rows.
"""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, Text, DateTime, String
from app.database import Base


def utcnow() -> datetime:
    """Naive UTC now; SQLite drops tzinfo, so all stored timestamps are naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Student(Base):
    """
    SQLAlchemy model for the students table.

    `id` uses AUTOINCREMENT on SQLite so ids of deleted rows are never
    handed out again.
    """
    __tablename__ = "students"
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True,
                doc="Surrogate key assigned on insert")
    name = Column(Text, nullable=False,
                  doc="Student's full name")
    student_id = Column(String(64), nullable=False, unique=True, index=True,
                        doc="Business key, unique across all students")
    address = Column(Text, nullable=False,
                     doc="Postal address")
    email = Column(Text, nullable=True,
                   doc="Contact email (optional)")
    phone = Column(Text, nullable=True,
                   doc="Contact phone number, free-form (optional)")
    created_at = Column(DateTime, nullable=False, default=utcnow,
                        doc="Set once when the record is created")
    updated_at = Column(DateTime, nullable=False, default=utcnow,
                        doc="Refreshed on every successful update")

    def __repr__(self):
        return f"<Student(id={self.id}, student_id='{self.student_id}', name='{self.name}')>"
