"""
Student model - the single record type managed by the service.

Each student is uniquely identified by a UUID assigned on creation.
Hobbies and address are stored as JSON sub-documents; constraints on
the other fields are enforced by app.services.validation on write, not
by the table, so rows written under older rules are read back as-is.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Text, DateTime, String, Integer, JSON
from app.database import Base


def _isoformat(value):
    if value is None:
        return None
    # SQLite hands back naive datetimes; every stored timestamp is UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


class Student(Base):
    """
    SQLAlchemy model for the students table.

    Column names are snake_case; the API exposes the camelCase document
    produced by to_document().
    """
    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
                doc="Unique student identifier, immutable after creation")
    first_name = Column(Text, nullable=True,
                        doc="Trimmed first name")
    last_name = Column(Text, nullable=True, default="N/A",
                       doc="Last name ('N/A' when not provided)")
    age = Column(Integer, nullable=True,
                 doc="Age in years")
    country = Column(Text, nullable=True,
                     doc="Country of operation")
    hobbies = Column(JSON, nullable=False, default=list,
                     doc="Ordered list of hobbies, stored as provided")
    address = Column(JSON, nullable=True,
                     doc="Address sub-document: city, state, country, zipCode")
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        doc="Timestamp when the student record was created")
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc),
                        doc="Timestamp of the last write")

    def apply(self, record: dict):
        """Overwrite every data field from a validated record."""
        self.first_name = record["firstName"]
        self.last_name = record["lastName"]
        self.age = record["age"]
        self.country = record["country"]
        self.hobbies = record["hobbies"]
        self.address = record["address"]

    def to_document(self) -> dict:
        """Serialize to the API document shape."""
        return {
            "_id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "age": self.age,
            "country": self.country,
            "hobbies": list(self.hobbies or []),
            "address": dict(self.address) if self.address is not None else None,
            "createdAt": _isoformat(self.created_at),
            "updatedAt": _isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"<Student(id={self.id}, name='{self.first_name} {self.last_name}', country='{self.country}')>"
