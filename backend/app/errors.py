"""
Error taxonomy raised by the student service.

Route handlers catch StudentServiceError and turn it into the
FAILED response envelope.
"""

from typing import List


class StudentServiceError(Exception):
    """Base class for failures surfaced to the HTTP boundary."""


class ValidationFailed(StudentServiceError):
    """The candidate record violates one or more schema constraints."""

    def __init__(self, errors: List):
        self.errors = list(errors)
        details = ", ".join("{}: {}".format(e.field, e.message) for e in self.errors)
        super().__init__("Student validation failed: {}".format(details))


class StoreUnavailable(StudentServiceError):
    """The database could not be reached or the query failed."""
