"""
Students API routes - CRUD endpoints for student records.

Every response uses the same envelope:
- success: {"status": "SUCCESS", "message"?, "data" | "result"}
- failure: {"status": "FAILED", "message", "error", "errors"?} with HTTP 500

Validation failures and database failures both answer 500; validation
failures also carry the structured field errors under "errors".
"""

from typing import Any
from fastapi import APIRouter, Body, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.errors import StudentServiceError, ValidationFailed
from app.services.students import StudentService
from app.logging_config import get_logger, log_with_context

router = APIRouter()
logger = get_logger("http")


def get_student_service(request: Request) -> StudentService:
    """FastAPI dependency: a service bound to the application's store."""
    return StudentService(request.app.state.store)


def failure_response(message: str, error: Exception) -> JSONResponse:
    """Log a failed operation and build the FAILED envelope."""
    content = {
        "status": "FAILED",
        "message": message,
        "error": str(error),
    }
    if isinstance(error, ValidationFailed):
        content["errors"] = [e.model_dump() for e in error.errors]

    log_with_context(logger, "ERROR", "{}: {}".format(message, str(error)),
                     extra_data={"error_type": type(error).__name__})
    return JSONResponse(status_code=500, content=jsonable_encoder(content))


FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


async def read_candidate(request: Request, payload: Any = Body(None)) -> dict:
    """
    FastAPI dependency: the candidate record from a JSON or form body.

    Form fields arrive as strings (age is cast by the validator); a key
    sent more than once becomes a list. Anything but a JSON object or a
    form is an empty candidate and fails on the required fields.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPE):
        form = await request.form()
        candidate = {}
        for key in form.keys():
            values = form.getlist(key)
            candidate[key] = values if len(values) > 1 else values[0]
        return candidate
    return payload if isinstance(payload, dict) else {}


@router.get("/students")
def list_students(service: StudentService = Depends(get_student_service)):
    """List every student."""
    try:
        students = service.list_students()
    except StudentServiceError as e:
        return failure_response("Error fetching students", e)

    log_with_context(logger, "INFO", "Listed {} students".format(len(students)))
    return {"status": "SUCCESS", "data": students}


@router.get("/students/{student_id}")
def get_student(student_id: str, service: StudentService = Depends(get_student_service)):
    """Fetch one student; result is null when the id is unknown."""
    try:
        result = service.get_student(student_id)
    except StudentServiceError as e:
        return failure_response("Error fetching student", e)

    return {"status": "SUCCESS", "result": result}


@router.post("/students", status_code=201)
def create_student(candidate: dict = Depends(read_candidate),
                   service: StudentService = Depends(get_student_service)):
    """Validate and store a new student."""
    try:
        result = service.create_student(candidate)
    except StudentServiceError as e:
        return failure_response("Error creating students", e)

    return {
        "status": "SUCCESS",
        "message": "New student added successfully",
        "result": result
    }


@router.patch("/students/{student_id}")
def update_student(student_id: str, candidate: dict = Depends(read_candidate),
                   service: StudentService = Depends(get_student_service)):
    """
    Replace a student's fields.

    The result is the document as it was before the update, or null when
    no student has this id.
    """
    try:
        result = service.update_student(student_id, candidate)
    except StudentServiceError as e:
        return failure_response("Error updating student details", e)

    return {
        "status": "SUCCESS",
        "message": "Student details updated successfully",
        "result": result
    }


@router.delete("/students/{student_id}")
def delete_student(student_id: str, service: StudentService = Depends(get_student_service)):
    """Delete a student; the result is the removed document or null."""
    try:
        result = service.delete_student(student_id)
    except StudentServiceError as e:
        return failure_response("Error deleting student", e)

    return {
        "status": "SUCCESS",
        "message": "Student deleted successfully",
        "result": result
    }
