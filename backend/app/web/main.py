"""
Student Records web frontend - server-rendered pages over the students API.

Runs as its own FastAPI app (port 3000 by convention) and talks to the
backend only through StudentApiClient; it keeps no records of its own.

Pages:
- /                         list of students
- /students/new             add form
- /students/{id}/edit       edit form (student_id locked)
- /students/{id}/view       read-only details with a delete action
"""

from contextlib import asynccontextmanager
from functools import lru_cache
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from app.client.api_client import ApiError, StudentApiClient
from app.logging_config import setup_logging, get_logger, log_with_context
from app.web.forms import (
    FormMode, build_payload, empty_values, form_context, prevalidate, values_from_student
)

setup_logging()
logger = get_logger("web")

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


@lru_cache
def get_api_client() -> StudentApiClient:
    return StudentApiClient.from_url()


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Close the shared HTTP connection pool if a request ever opened it
    if get_api_client.cache_info().currsize:
        get_api_client().close()
        get_api_client.cache_clear()
        log_with_context(logger, "INFO", "API client closed")


app = FastAPI(title="Student Records Web", docs_url=None, redoc_url=None, lifespan=lifespan)


def _parse_record_id(raw: str) -> Optional[int]:
    """Positive integer id from the URL, or None when it cannot name a student."""
    if not (raw.isascii() and raw.isdigit()) or int(raw) <= 0:
        return None
    return int(raw)


def _render_form(request: Request, mode: FormMode, values: dict, errors: dict = None,
                 record_id: int = None, message: str = None, status_code: int = 200):
    return templates.TemplateResponse(
        request, "student_form.html",
        form_context(mode, values, errors, record_id=record_id, message=message),
        status_code=status_code,
    )


def _render_not_found(request: Request):
    return templates.TemplateResponse(request, "error.html", {"message": "Student not found"}, status_code=404)


def _render_error(request: Request, error: ApiError):
    if error.is_not_found:
        return _render_not_found(request)
    return templates.TemplateResponse(request, "error.html",
                                      {"message": "Something went wrong, please try again later"},
                                      status_code=502)


def _submit_errors(error: ApiError) -> dict:
    """Map an API rejection onto form fields."""
    if error.status_code == 409:
        return {"student_id": error.message}
    return error.field_errors


def _to_list(request: Request):
    return RedirectResponse(url=str(request.url_for("list_students")), status_code=303)


@app.get("/", name="list_students")
def list_students(request: Request, client: StudentApiClient = Depends(get_api_client)):
    try:
        students = client.get_all()
    except ApiError as e:
        log_with_context(logger, "ERROR", "Could not load students: {}".format(e.message))
        return templates.TemplateResponse(request, "students_list.html",
                                          {"students": [], "error": "Error loading students"},
                                          status_code=502)
    return templates.TemplateResponse(request, "students_list.html", {"students": students, "error": None})


@app.get("/students/new", name="new_student")
def new_student(request: Request):
    return _render_form(request, FormMode.ADD, empty_values())


@app.post("/students/new")
def create_student(
    request: Request,
    name: str = Form(""),
    student_id: str = Form(""),
    address: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    client: StudentApiClient = Depends(get_api_client),
):
    values = {"name": name, "student_id": student_id, "address": address, "email": email, "phone": phone}
    payload = build_payload(FormMode.ADD, values)

    errors = prevalidate(FormMode.ADD, payload)
    if errors:
        return _render_form(request, FormMode.ADD, values, errors, status_code=400)

    try:
        created = client.create(payload)
    except ApiError as e:
        if e.status_code in (400, 409):
            return _render_form(request, FormMode.ADD, values, _submit_errors(e),
                                message=e.message, status_code=e.status_code)
        return _render_error(request, e)

    log_with_context(logger, "INFO", "Student {} added".format(created.student_id),
                     context={"record_id": created.id})
    return _to_list(request)


@app.get("/students/{record_id}/edit", name="edit_student")
def edit_student(request: Request, record_id: str, client: StudentApiClient = Depends(get_api_client)):
    record_id = _parse_record_id(record_id)
    if record_id is None:
        return _render_not_found(request)
    try:
        student = client.get_by_id(record_id)
    except ApiError as e:
        return _render_error(request, e)
    return _render_form(request, FormMode.EDIT, values_from_student(student), record_id=record_id)


@app.post("/students/{record_id}/edit")
def update_student(
    request: Request,
    record_id: str,
    name: str = Form(""),
    address: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    client: StudentApiClient = Depends(get_api_client),
):
    record_id = _parse_record_id(record_id)
    if record_id is None:
        return _render_not_found(request)

    # student_id is disabled in the edit form, so browsers never submit it
    values = {"name": name, "address": address, "email": email, "phone": phone}
    payload = build_payload(FormMode.EDIT, values)

    errors = prevalidate(FormMode.EDIT, payload)
    if errors:
        values["student_id"] = _current_student_id(client, record_id)
        return _render_form(request, FormMode.EDIT, values, errors, record_id=record_id, status_code=400)

    try:
        client.update(record_id, payload)
    except ApiError as e:
        if e.status_code == 400:
            values["student_id"] = _current_student_id(client, record_id)
            return _render_form(request, FormMode.EDIT, values, _submit_errors(e), record_id=record_id,
                                message=e.message, status_code=400)
        return _render_error(request, e)

    log_with_context(logger, "INFO", "Student {} updated".format(record_id), context={"record_id": record_id})
    return _to_list(request)


def _current_student_id(client: StudentApiClient, record_id: int) -> str:
    """Locked student_id to show again when an edit form is re-rendered."""
    try:
        return client.get_by_id(record_id).student_id
    except ApiError:
        return ""


@app.get("/students/{record_id}/view", name="view_student")
def view_student(request: Request, record_id: str, client: StudentApiClient = Depends(get_api_client)):
    record_id = _parse_record_id(record_id)
    if record_id is None:
        return _render_not_found(request)
    try:
        student = client.get_by_id(record_id)
    except ApiError as e:
        return _render_error(request, e)
    return _render_form(request, FormMode.VIEW, values_from_student(student), record_id=record_id)


@app.post("/students/{record_id}/delete", name="delete_student")
def delete_student(request: Request, record_id: str, client: StudentApiClient = Depends(get_api_client)):
    record_id = _parse_record_id(record_id)
    if record_id is None:
        return _render_not_found(request)
    try:
        client.delete(record_id)
    except ApiError as e:
        return _render_error(request, e)

    log_with_context(logger, "INFO", "Student {} deleted".format(record_id), context={"record_id": record_id})
    return _to_list(request)
