"""
Maps an HTTP status code and raw body to a decoded result or an ApiError.

(c) Passlick Development 2025. All rights reserved.
"""


from __future__ import annotations

import json
from typing import Any, Dict, List, Union

from .errors import ApiError, ErrorKind

ApiResult = Union[Dict[str, Any], List[Any]]


def _decode(body: str) -> Any:
    try:
        return json.loads(body)
    except ValueError:
        return None


def interpret_response(status_code: int, body: str, url: str) -> ApiResult:
    """Return the decoded JSON object/array of a 200 response, raise otherwise."""
    if status_code == 200:
        decoded = _decode(body)
        if not isinstance(decoded, (dict, list)):
            raise ApiError(
                ErrorKind.INVALID_JSON_RESPONSE,
                f"Invalid JSON response from the server for request: {url}",
                status_code=status_code,
                url=url,
            )
        return decoded
    if status_code == 400:
        raise ApiError(
            ErrorKind.BAD_REQUEST,
            f"Server response code 400, bad request for `{url}`.",
            status_code=status_code,
            url=url,
        )
    if status_code == 401:
        raise ApiError(
            ErrorKind.AUTHENTICATION,
            "Could not authenticate your request, please make sure your API credentials are correct.",
            status_code=status_code,
            url=url,
        )
    if status_code == 403:
        decoded = _decode(body)
        detail = decoded.get("exception") if isinstance(decoded, dict) else None
        if detail:
            message = f"API access not allowed: `{detail}`"
        else:
            message = "Your account currently has no access to this API, make sure you have an active subscription."
        raise ApiError(ErrorKind.FORBIDDEN, message, status_code=status_code, url=url)
    if status_code == 404:
        raise ApiError(
            ErrorKind.NOT_FOUND,
            "The request was valid, but nothing could be found.",
            status_code=status_code,
            url=url,
        )
    if status_code == 429:
        raise ApiError(
            ErrorKind.TOO_MANY_REQUESTS,
            f"Too many requests made, please slow down: {body}",
            status_code=status_code,
            body=body,
            url=url,
        )
    if status_code == 503:
        raise ApiError(
            ErrorKind.SERVER_UNAVAILABLE,
            f"The API server is currently not available: {body}",
            status_code=status_code,
            body=body,
            url=url,
        )
    raise ApiError(
        ErrorKind.UNEXPECTED,
        f"Unexpected server response code `{status_code}`.",
        status_code=status_code,
        url=url,
    )


__all__ = ["ApiResult", "interpret_response"]
