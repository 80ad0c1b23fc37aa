"""
URL and form encoding helpers for API calls.

Functions:
    encode_segment(value) -> str:
        Percent-encodes a single path segment (space becomes %20, never +).

    build_path(prefix, *values) -> str:
        Joins a literal path prefix with independently encoded segments.

    build_query(params) -> str:
        Builds a query string from the parameters that are not None.

    build_form(fields) -> dict:
        Normalizes a POST field set for application/x-www-form-urlencoded
        encoding, with list values sent as repeated keys.

(c) Passlick Development 2025. All rights reserved.
"""


from __future__ import annotations

from typing import Any, Dict, List, Mapping, Union
from urllib.parse import quote

Segment = Union[str, int, float]


def _to_text(value: Segment) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


def encode_segment(value: Segment) -> str:
    return quote(_to_text(value), safe="")


def build_path(prefix: str, *values: Segment) -> str:
    parts = [prefix.strip("/")]
    parts.extend(encode_segment(v) for v in values)
    return "/".join(parts)


def build_query(params: Mapping[str, Segment | None]) -> str:
    return "&".join(
        f"{key}={encode_segment(value)}"
        for key, value in params.items()
        if value is not None
    )


def build_form(fields: Mapping[str, Any]) -> Dict[str, Union[str, List[str]]]:
    form: Dict[str, Union[str, List[str]]] = {}
    for key, value in fields.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            form[key] = [_to_text(v) for v in value]
        else:
            form[key] = _to_text(value)
    return form


__all__ = ["encode_segment", "build_path", "build_query", "build_form"]
