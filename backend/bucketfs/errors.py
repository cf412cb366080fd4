from __future__ import annotations

from http import HTTPStatus


class ObjectStoreError(Exception):
    """Request failure mapped to exactly one HTTP status and a short plain-text body."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or HTTPStatus(self.status_code).phrase
        super().__init__(self.detail)


class BadRequest(ObjectStoreError):
    status_code = HTTPStatus.BAD_REQUEST


class NotFound(ObjectStoreError):
    status_code = HTTPStatus.NOT_FOUND


class MethodNotAllowed(ObjectStoreError):
    status_code = HTTPStatus.METHOD_NOT_ALLOWED


class InternalServerError(ObjectStoreError):
    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
