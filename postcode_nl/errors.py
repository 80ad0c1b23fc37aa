"""
Error taxonomy for the Postcode.nl API client.

Every failure surfaces as a single exception type, ApiError, tagged with an
ErrorKind. Callers branch on ``error.kind`` instead of on exception classes.

Classes:
    ErrorKind: The flat set of failure kinds the client can report.
    ApiError: Exception carrying an ErrorKind plus the payload relevant to it.

(c) Passlick Development 2025. All rights reserved.
"""


from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    TRANSPORT_UNAVAILABLE = "transport_unavailable"
    TRANSPORT_FAILURE = "transport_failure"
    INVALID_SESSION_VALUE = "invalid_session_value"
    INVALID_POSTCODE = "invalid_postcode"
    INVALID_JSON_RESPONSE = "invalid_json_response"
    BAD_REQUEST = "bad_request"
    AUTHENTICATION = "authentication"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    TOO_MANY_REQUESTS = "too_many_requests"
    SERVER_UNAVAILABLE = "server_unavailable"
    UNEXPECTED = "unexpected"


class ApiError(Exception):
    """Raised for every validation, transport and response failure.

    Only the payload fields that apply to ``kind`` are set:
    ``status_code`` and ``url`` for HTTP outcomes, ``body`` for 429/503,
    ``error_code`` for transport failures.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
        url: str | None = None,
        error_code: str | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.body = body
        self.url = url
        self.error_code = error_code

    def __repr__(self) -> str:
        return f"ApiError({self.kind.name}, {self.message!r})"


__all__ = ["ErrorKind", "ApiError"]
