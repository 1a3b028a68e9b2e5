"""
HTTP client for the student records API.

Mirrors the REST surface one method per endpoint. The full list is kept in
a short-lived cache that every mutation invalidates, so a list
fetched right after a create/update/delete always reflects it.
"""

from typing import Dict, List, Optional

import httpx

from app.client.cache import TTLCache
from app.config import API_URL, CLIENT_CACHE_TTL_SECONDS, CLIENT_TIMEOUT_SECONDS
from app.logging_config import get_logger, log_with_context
from app.schemas.student import StudentRead

STUDENTS_PATH = "/api/students"
LIST_CACHE_KEY = "students"

logger = get_logger("client")


class ApiError(Exception):
    """Non-2xx response (or transport failure) from the students API."""

    def __init__(self, status_code: int, message: str, field_errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.field_errors = field_errors or {}

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


def _field_errors(details) -> Dict[str, str]:
    errors = {}
    for detail in details or []:
        field = str(detail.get("field", ""))
        if field.startswith("body."):
            field = field[len("body."):]
        errors.setdefault(field, detail.get("message", ""))
    return errors


class StudentApiClient:
    """
    Thin wrapper over an httpx.Client pointed at the API base URL.

    Any httpx.Client works, including Starlette's TestClient.
    """

    def __init__(self, http: httpx.Client, cache_ttl_seconds: float = CLIENT_CACHE_TTL_SECONDS):
        self.http = http
        self.cache = TTLCache(cache_ttl_seconds)

    @classmethod
    def from_url(cls, base_url: str = API_URL, **kwargs) -> "StudentApiClient":
        return cls(httpx.Client(base_url=base_url, timeout=CLIENT_TIMEOUT_SECONDS), **kwargs)

    def close(self) -> None:
        self.http.close()

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self.http.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            log_with_context(logger, "ERROR", "Request {} {} failed: {}".format(method, path, e))
            raise ApiError(503, "Students API is unavailable") from e

        if response.is_success:
            return response

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        error = ApiError(response.status_code,
                         body.get("error") or "Request failed with status {}".format(response.status_code),
                         _field_errors(body.get("details")))
        log_with_context(logger, "WARNING", "{} {} -> {}: {}".format(method, path, response.status_code, error.message),
                         extra_data={"field_errors": error.field_errors})
        raise error

    def _mutate(self, method: str, path: str, **kwargs) -> httpx.Response:
        # A failed call may still have reached the server
        try:
            return self._request(method, path, **kwargs)
        finally:
            self.cache.invalidate(LIST_CACHE_KEY)

    def get_all(self) -> List[StudentRead]:
        cached = self.cache.get(LIST_CACHE_KEY)
        if cached is not None:
            return cached
        response = self._request("GET", STUDENTS_PATH)
        students = [StudentRead.model_validate(item) for item in response.json()]
        self.cache.set(LIST_CACHE_KEY, students)
        return students

    def get_by_id(self, record_id: int) -> StudentRead:
        response = self._request("GET", "{}/{}".format(STUDENTS_PATH, record_id))
        return StudentRead.model_validate(response.json())

    def create(self, data: dict) -> StudentRead:
        response = self._mutate("POST", STUDENTS_PATH, json=data)
        return StudentRead.model_validate(response.json())

    def update(self, record_id: int, data: dict) -> StudentRead:
        response = self._mutate("PUT", "{}/{}".format(STUDENTS_PATH, record_id), json=data)
        return StudentRead.model_validate(response.json())

    def delete(self, record_id: int) -> str:
        response = self._mutate("DELETE", "{}/{}".format(STUDENTS_PATH, record_id))
        return response.json().get("message", "")
