"""Web frontend - pages rendered over the in-process API.

Invariants:
    - add form is empty and fully editable
    - edit form is pre-filled with student_id locked
    - view form is fully read-only and carries the delete action
    - validation errors are shown inline next to the field
"""

import re

import pytest
from fastapi.testclient import TestClient

from app.client.api_client import ApiError
from app.web.forms import FormMode, build_payload, form_context, is_locked, prevalidate
from app.web.main import app as web_app, get_api_client


def _input_tag(html, field):
    match = re.search(r'<(input|textarea)[^>]*id="{}"[^>]*>'.format(field), html)
    assert match, field
    return match.group(0)


# ── Form state ───────────────────────────────────────────────

@pytest.mark.parametrize("mode, field, locked", [
    (FormMode.ADD, "student_id", False),
    (FormMode.ADD, "name", False),
    (FormMode.EDIT, "student_id", True),
    (FormMode.EDIT, "name", False),
    (FormMode.VIEW, "name", True),
    (FormMode.VIEW, "phone", True),
])
def test_is_locked(mode, field, locked):
    assert is_locked(mode, field) is locked


def test_build_payload_omits_empty_optionals_on_add():
    payload = build_payload(FormMode.ADD, {"name": " Jo ", "student_id": "ST001", "address": "1 Road",
                                           "email": "", "phone": ""})
    assert payload == {"name": "Jo", "student_id": "ST001", "address": "1 Road"}


def test_build_payload_clears_empty_optionals_and_skips_student_id_on_edit():
    payload = build_payload(FormMode.EDIT, {"name": "Jo", "student_id": "ST001", "address": "1 Road",
                                            "email": "", "phone": "555"})
    assert payload == {"name": "Jo", "address": "1 Road", "email": None, "phone": "555"}


def test_prevalidate_maps_errors_to_fields():
    errors = prevalidate(FormMode.ADD, {"name": "J", "student_id": "ST001", "address": "1 Road"})
    assert errors == {"name": "Name must be at least 2 characters"}


def test_view_context_hides_errors():
    context = form_context(FormMode.VIEW, {"name": "J"}, {"name": "too short"}, record_id=1)
    assert all(field["error"] is None for field in context["fields"])


# ── Pages ────────────────────────────────────────────────────

def test_list_page_shows_empty_state(web_client):
    res = web_client.get("/")
    assert res.status_code == 200
    assert "No students found." in res.text


def test_add_student_redirects_to_list(web_client):
    res = web_client.post("/students/new", data={
        "name": "John Doe", "student_id": "ST001", "address": "123 Main St, City", "email": "", "phone": "",
    })

    assert res.status_code == 200
    assert str(res.url).endswith("/")
    assert "John Doe" in res.text
    assert "ST001" in res.text


def test_add_form_is_empty_and_editable(web_client):
    res = web_client.get("/students/new")

    assert "Add New Student" in res.text
    for field in ("name", "student_id", "address", "email", "phone"):
        assert "disabled" not in _input_tag(res.text, field)


def test_add_with_invalid_fields_shows_inline_errors(web_client, api_client):
    res = web_client.post("/students/new", data={"name": "J", "student_id": "ST001", "address": "123 Main St"})

    assert res.status_code == 400
    assert "Name must be at least 2 characters" in res.text
    assert api_client.get_all() == []


def test_add_duplicate_student_id_shows_conflict_on_field(web_client, api_client, john):
    api_client.create(john)

    res = web_client.post("/students/new", data={**john, "name": "Other Person"})

    assert res.status_code == 409
    assert "Student ID already exists" in res.text


def test_edit_form_is_prefilled_with_student_id_locked(web_client, api_client, john):
    student = api_client.create(john)

    res = web_client.get(f"/students/{student.id}/edit")

    assert "Edit Student" in res.text
    assert 'value="John Doe"' in _input_tag(res.text, "name")
    assert "disabled" not in _input_tag(res.text, "name")
    assert "disabled" in _input_tag(res.text, "student_id")


def test_edit_submission_updates_record(web_client, api_client, john):
    student = api_client.create({**john, "email": "john@example.com"})

    res = web_client.post(f"/students/{student.id}/edit", data={
        "name": "Johnny Doe", "address": "123 Main St, City", "email": "", "phone": "555-0000",
    })

    assert res.status_code == 200
    updated = api_client.get_by_id(student.id)
    assert updated.name == "Johnny Doe"
    assert updated.phone == "555-0000"
    assert updated.email is None
    assert updated.student_id == "ST001"


def test_edit_with_invalid_field_keeps_locked_student_id(web_client, api_client, john):
    student = api_client.create(john)

    res = web_client.post(f"/students/{student.id}/edit", data={"name": "Johnny Doe", "address": "x"})

    assert res.status_code == 400
    assert "Address must be at least 5 characters" in res.text
    assert 'value="ST001"' in _input_tag(res.text, "student_id")


def test_view_page_is_read_only_with_delete_action(web_client, api_client, john):
    student = api_client.create(john)

    res = web_client.get(f"/students/{student.id}/view")

    assert "Student Details" in res.text
    for field in ("name", "student_id", "address", "email", "phone"):
        assert "disabled" in _input_tag(res.text, field)
    assert f"/students/{student.id}/delete" in res.text


def test_delete_action_removes_record(web_client, api_client, john):
    student = api_client.create(john)

    res = web_client.post(f"/students/{student.id}/delete")

    assert res.status_code == 200
    assert "No students found." in res.text
    with pytest.raises(ApiError):
        api_client.get_by_id(student.id)


def test_unknown_student_page_returns_404(web_client):
    res = web_client.get("/students/999/view")
    assert res.status_code == 404
    assert "Student not found" in res.text


@pytest.mark.parametrize("method, path", [
    ("get", "/students/abc/view"),
    ("get", "/students/0/edit"),
    ("post", "/students/1.5/edit"),
    ("post", "/students/-1/delete"),
])
def test_malformed_student_id_renders_not_found_page(web_client, method, path):
    res = getattr(web_client, method)(path)

    assert res.status_code == 404
    assert res.headers["content-type"].startswith("text/html")
    assert "Student not found" in res.text


class _UnavailableClient:
    def get_all(self):
        raise ApiError(503, "Students API is unavailable")


def test_list_page_shows_generic_error_when_api_is_down():
    web_app.dependency_overrides[get_api_client] = lambda: _UnavailableClient()
    try:
        res = TestClient(web_app).get("/")
    finally:
        web_app.dependency_overrides.clear()

    assert res.status_code == 502
    assert "Error loading students" in res.text


def test_shutdown_closes_shared_api_client():
    get_api_client.cache_clear()
    with TestClient(web_app):
        shared = get_api_client()
        assert not shared.http.is_closed

    assert shared.http.is_closed
    assert get_api_client.cache_info().currsize == 0
