"""
Student Service - CRUD operations on student records.

Sits between the HTTP routes and the database:
1. Validates candidate records before every write
2. Opens one short-lived session per operation
3. Translates SQLAlchemy failures into StoreUnavailable

Update and delete on an unknown id are no-ops that return None rather
than raising. Update replaces the whole document; fields omitted from
the input fall back to their defaults.
"""

import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional
from sqlalchemy.exc import SQLAlchemyError

from app.database import StudentStore
from app.errors import StoreUnavailable, ValidationFailed
from app.models.student import Student
from app.services.validation import validate_student
from app.logging_config import get_logger, log_with_context

logger = get_logger("db")


class StudentService:
    """Facade over the students table. Holds no state besides the store."""

    def __init__(self, store: StudentStore):
        self.store = store

    @contextmanager
    def _session(self, operation: str):
        db = self.store.session()
        start_time = time.time()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            log_with_context(logger, "ERROR",
                "Database error during {}: {}".format(operation, str(e)),
                extra_data={"error_type": type(e).__name__},
                exc_info=True)
            raise StoreUnavailable(str(e)) from e
        finally:
            db.close()

        duration_ms = (time.time() - start_time) * 1000
        log_with_context(logger, "DEBUG", "{} completed".format(operation),
                         extra_data={"duration_ms": round(duration_ms, 2)})

    def _validated(self, values: Optional[Mapping[str, Any]]) -> dict:
        result = validate_student(values)
        if not result.ok:
            raise ValidationFailed(result.errors)
        return result.record

    def list_students(self) -> List[dict]:
        """Return every stored student in the store's natural order."""
        with self._session("list_students") as db:
            return [s.to_document() for s in db.query(Student).all()]

    def get_student(self, student_id: str) -> Optional[dict]:
        """Return one student, or None when the id is unknown."""
        with self._session("get_student") as db:
            student = db.query(Student).filter(Student.id == student_id).first()
            return student.to_document() if student else None

    def create_student(self, values: Optional[Mapping[str, Any]]) -> dict:
        """Validate and insert a new student. Returns the stored document."""
        record = self._validated(values)
        now = datetime.now(timezone.utc)

        with self._session("create_student") as db:
            student = Student(id=str(uuid.uuid4()), created_at=now, updated_at=now)
            student.apply(record)
            db.add(student)
            document = student.to_document()

        log_with_context(logger, "INFO",
            "Created new student: {}".format(record["firstName"]),
            context={"student_id": document["_id"]})
        return document

    def update_student(self, student_id: str, values: Optional[Mapping[str, Any]]) -> Optional[dict]:
        """
        Replace a student's fields with the validated values.

        Returns the document as it was before the update, or None if no
        student has this id (nothing is written in that case).
        """
        record = self._validated(values)

        with self._session("update_student") as db:
            student = db.query(Student).filter(Student.id == student_id).first()
            if student is None:
                log_with_context(logger, "INFO", "Update skipped, student not found",
                                 context={"student_id": student_id})
                return None

            previous = student.to_document()
            student.apply(record)
            student.updated_at = datetime.now(timezone.utc)

        log_with_context(logger, "INFO", "Updated student",
                         context={"student_id": student_id})
        return previous

    def delete_student(self, student_id: str) -> Optional[dict]:
        """Delete a student. Returns the removed document, or None if absent."""
        with self._session("delete_student") as db:
            student = db.query(Student).filter(Student.id == student_id).first()
            if student is None:
                log_with_context(logger, "INFO", "Delete skipped, student not found",
                                 context={"student_id": student_id})
                return None

            document = student.to_document()
            db.delete(student)

        log_with_context(logger, "INFO", "Deleted student",
                         context={"student_id": student_id})
        return document
