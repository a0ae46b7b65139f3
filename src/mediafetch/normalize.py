"""Map provider responses onto canonical results.

Each use case owns an ordered tuple of shape matchers. A matcher looks at one
decoded payload and either extracts a canonical result or returns ``None``;
the first matcher that answers wins, so the tuple order is the priority order
among overlapping shapes.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Literal, Protocol

import msgspec

from .providers import ResponseKind
from .results import Failure
from .transport import HttpResponse

ParsedKind = Literal["json", "binary", "text"]

UNRECOGNIZED_SHAPE = "unrecognized response shape"


@dataclass(frozen=True, slots=True)
class ParsedResponse:
    kind: ParsedKind
    payload: Any
    content_type: str = ""


class ShapeMatcher[T](Protocol):
    def __call__(self, payload: Any) -> T | None: ...


class _Shape[T](Protocol):
    def to_result(self) -> T | None: ...


def shape_matcher[T](shape: type[_Shape[T]]) -> ShapeMatcher[T]:
    """Build a matcher that converts the payload into ``shape`` first.

    Payloads missing required fields (or carrying them with the wrong type)
    fail conversion and count as no match.
    """

    def match(payload: Any) -> T | None:
        try:
            converted = msgspec.convert(payload, type=shape, strict=False)
        except msgspec.ValidationError:
            return None
        return converted.to_result()

    match.__name__ = f"match_{shape.__name__}"
    return match


def envelope_ok(payload: Any) -> bool:
    if not isinstance(payload, dict):
        return False
    flags = [payload[key] for key in ("success", "status") if key in payload]
    if not flags:
        return True
    return any(bool(flag) for flag in flags)


def first_text(*values: Any) -> str | None:
    for value in values:
        if isinstance(value, str) and value.strip():
            return value
    return None


@dataclass(frozen=True, slots=True)
class UseCase[T]:
    name: str
    matchers: tuple[ShapeMatcher[T], ...]
    failure_message: str
    envelope: Callable[[Any], bool] | None = envelope_ok
    media_type: re.Pattern[str] | None = None
    binary_result: Callable[[bytes], T] | None = None


def parse_response(kind: ResponseKind, response: HttpResponse) -> ParsedResponse | None:
    content_type = response.content_type
    if kind == "auto":
        if "application/json" in content_type:
            kind = "json"
        elif "image" in content_type or "video" in content_type or "audio" in content_type:
            kind = "binary"
        else:
            return None
    if kind == "json":
        try:
            payload = response.json()
        except msgspec.DecodeError:
            return None
        return ParsedResponse("json", payload, content_type)
    if kind == "text":
        return ParsedResponse("text", response.text().strip(), content_type)
    return ParsedResponse("binary", response.content, content_type)


def _normalize_binary[T](parsed: ParsedResponse, use_case: UseCase[T]) -> T | Failure:
    if use_case.binary_result is None or use_case.media_type is None:
        return Failure(error=UNRECOGNIZED_SHAPE)
    if not use_case.media_type.search(parsed.content_type):
        return Failure(error=f"unexpected content type {parsed.content_type!r}")
    if not parsed.payload:
        return Failure(error="empty body")
    return use_case.binary_result(bytes(parsed.payload))


def normalize[T](parsed: ParsedResponse, use_case: UseCase[T]) -> T | Failure:
    if parsed.kind == "binary":
        return _normalize_binary(parsed, use_case)
    payload = parsed.payload
    if parsed.kind == "json" and use_case.envelope is not None:
        if not use_case.envelope(payload):
            return Failure(error="provider reported failure")
    for matcher in use_case.matchers:
        result = matcher(payload)
        if result is not None:
            return result
    return Failure(error=UNRECOGNIZED_SHAPE)
