"""Mapping from core failures to HTTP responses."""

from __future__ import annotations

from typing import TypeVar

from fastapi import status

from kaamtrack.errors import ErrorKind, Failure

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.WORKER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CODE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CODE_EXPIRED: status.HTTP_410_GONE,
    ErrorKind.CODE_INVALID: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.INVALID_AMOUNT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.INVALID_STATUS: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.INVALID_INPUT: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.DUPLICATE_KEY_RACE: status.HTTP_409_CONFLICT,
}


class FailureResponse(Exception):
    """Raised by route handlers to turn a Failure into an error response."""

    def __init__(self, failure: Failure):
        self.failure = failure
        super().__init__(failure.message)

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND.get(self.failure.kind, status.HTTP_400_BAD_REQUEST)


def raise_for_failure(failure: Failure | None) -> None:
    if failure is not None:
        raise FailureResponse(failure)


T = TypeVar("T")


def require_result(value: T | None, failure: Failure | None) -> T:
    """Return the value of a successful operation, or raise its failure."""
    raise_for_failure(failure)
    if value is None:
        raise RuntimeError("Operation returned neither a result nor a failure")
    return value
