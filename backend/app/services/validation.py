"""
Validation Service - Schema rules for student records.

Every write (create or update) passes through validate_student() before
reaching the database. The rules per field:

1. firstName: required, trimmed, 3 to 10 characters
2. lastName:  optional, defaults to "N/A"
3. age:       required integer between 18 and 25 (inclusive)
4. country:   required, one of India / USA / UK
5. hobbies:   optional list, elements are not checked
6. address:   optional object with city, state, country, zipCode

All fields are checked before returning so a client sees every problem
with its payload at once, not just the first one.
"""

from typing import Any, List, Mapping, Optional
from pydantic import BaseModel, Field

from app.logging_config import get_logger, log_with_context

logger = get_logger("validation")

# ──────────────────────────────────────────────────────────────
# Schema constants
# ──────────────────────────────────────────────────────────────
FIRST_NAME_MIN_LENGTH = 3
FIRST_NAME_MAX_LENGTH = 10
MIN_AGE = 18
MAX_AGE = 25
ALLOWED_COUNTRIES = ("India", "USA", "UK")
DEFAULT_LAST_NAME = "N/A"
ADDRESS_FIELDS = ("city", "state", "country", "zipCode")

# Error kinds
REQUIRED = "required"
TYPE = "type"
LENGTH = "length"
RANGE = "range"
ENUM = "enum"


class FieldError(BaseModel):
    """One violated constraint on one field."""
    field: str = Field(..., description="Name of the offending field, e.g. firstName")
    kind: str = Field(..., description="required | type | length | range | enum")
    message: str = Field(..., description="Human-readable explanation")
    value: Any = Field(None, description="The rejected input value")


class ValidationResult(BaseModel):
    """Either a validated record or the list of errors that prevented one."""
    record: Optional[dict] = None
    errors: List[FieldError] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _human_join(values) -> str:
    """("India", "USA", "UK") -> "India, USA or UK" """
    values = list(values)
    if len(values) <= 1:
        return "".join(values)
    return "{} or {}".format(", ".join(values[:-1]), values[-1])


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_first_name(value, errors: List[FieldError]) -> Optional[str]:
    if _is_blank(value):
        errors.append(FieldError(field="firstName", kind=REQUIRED,
                                 message="First name is required", value=value))
        return None
    if not isinstance(value, str):
        errors.append(FieldError(field="firstName", kind=TYPE,
                                 message="First name must be a string", value=value))
        return None

    trimmed = value.strip()
    if len(trimmed) < FIRST_NAME_MIN_LENGTH:
        errors.append(FieldError(
            field="firstName", kind=LENGTH, value=value,
            message="First name must be at least {} characters".format(FIRST_NAME_MIN_LENGTH)))
    elif len(trimmed) > FIRST_NAME_MAX_LENGTH:
        errors.append(FieldError(
            field="firstName", kind=LENGTH, value=value,
            message="First name can not exceed {} characters".format(FIRST_NAME_MAX_LENGTH)))
    return trimmed


def _check_last_name(value, errors: List[FieldError]) -> Optional[str]:
    # Absent and null both take the default, which is never validated
    if value is None:
        return DEFAULT_LAST_NAME
    if not isinstance(value, str):
        errors.append(FieldError(field="lastName", kind=TYPE,
                                 message="Last name must be a string", value=value))
        return None
    return value


def _cast_age(value) -> Optional[int]:
    """
    Cast an incoming age to int the way a JSON/form client would expect.

    Accepts ints, integral floats (20.0) and numeric strings ("20").
    Returns None if the value cannot be read as a whole number.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _check_age(value, errors: List[FieldError]) -> Optional[int]:
    if _is_blank(value):
        errors.append(FieldError(field="age", kind=REQUIRED,
                                 message="Age is required", value=value))
        return None

    age = _cast_age(value)
    if age is None:
        errors.append(FieldError(field="age", kind=TYPE,
                                 message="Age must be a whole number", value=value))
        return None

    if age < MIN_AGE:
        errors.append(FieldError(
            field="age", kind=RANGE, value=value,
            message="You need to be atleast {} years old".format(MIN_AGE)))
    elif age > MAX_AGE:
        errors.append(FieldError(
            field="age", kind=RANGE, value=value,
            message="You need to be {} years old or lesser".format(MAX_AGE)))
    return age


def _check_country(value, errors: List[FieldError]) -> Optional[str]:
    if _is_blank(value):
        errors.append(FieldError(field="country", kind=REQUIRED,
                                 message="Country is required", value=value))
        return None
    if not isinstance(value, str):
        errors.append(FieldError(field="country", kind=TYPE,
                                 message="Country must be a string", value=value))
        return None

    if value not in ALLOWED_COUNTRIES:
        errors.append(FieldError(
            field="country", kind=ENUM, value=value,
            message="We don't operate in {}. Please select a country from {}.".format(
                value, _human_join(ALLOWED_COUNTRIES))))
    return value


def _check_hobbies(value, errors: List[FieldError]) -> Optional[list]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        errors.append(FieldError(field="hobbies", kind=TYPE,
                                 message="Hobbies must be a list", value=value))
        return None
    return list(value)


def _check_address(value, errors: List[FieldError]) -> Optional[dict]:
    if value is None:
        return None
    if not isinstance(value, Mapping):
        errors.append(FieldError(field="address", kind=TYPE,
                                 message="Address must be an object", value=value))
        return None
    # Unknown keys are dropped, known sub-fields are kept as provided
    return {key: value[key] for key in ADDRESS_FIELDS if key in value}


def validate_student(candidate: Optional[Mapping[str, Any]]) -> ValidationResult:
    """
    Validate a candidate student record.

    Args:
        candidate: Raw field values (camelCase keys). Unknown keys are ignored.

    Returns:
        ValidationResult with either `record` (all six fields, defaults
        applied, firstName trimmed, age cast to int) or `errors`.
    """
    if candidate is None:
        candidate = {}

    errors: List[FieldError] = []
    record = {
        "firstName": _check_first_name(candidate.get("firstName"), errors),
        "lastName": _check_last_name(candidate.get("lastName"), errors),
        "age": _check_age(candidate.get("age"), errors),
        "country": _check_country(candidate.get("country"), errors),
        "hobbies": _check_hobbies(candidate.get("hobbies"), errors),
        "address": _check_address(candidate.get("address"), errors),
    }

    if errors:
        log_with_context(logger, "DEBUG",
            "Student validation failed with {} error(s)".format(len(errors)),
            extra_data={"fields": [e.field for e in errors], "kinds": [e.kind for e in errors]})
        return ValidationResult(errors=errors)

    return ValidationResult(record=record)
