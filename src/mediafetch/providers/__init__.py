"""Provider endpoints and per-use-case provider lists."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Literal
from urllib.parse import quote

ResponseKind = Literal["json", "binary", "text", "auto"]
HttpMethod = Literal["GET", "POST", "PUT"]


@dataclass(frozen=True, slots=True)
class ProviderEndpoint:
    name: str
    url_template: str
    response_kind: ResponseKind = "json"
    method: HttpMethod = "GET"
    upload_field: str | None = None
    form: tuple[tuple[str, str], ...] = ()
    raw_body: bool = False
    timeout_s: float | None = None

    def render_url(self, params: Mapping[str, str]) -> str:
        encoded = {key: quote(str(value), safe="") for key, value in params.items()}
        return self.url_template.format_map(encoded)


@dataclass(frozen=True, slots=True)
class Payload:
    content: bytes
    filename: str = "file.bin"
    mime_type: str = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class ProviderRequest:
    params: Mapping[str, str] = field(default_factory=dict)
    payload: Payload | None = None


def without_disabled(
    providers: Iterable[ProviderEndpoint], disabled: Iterable[str]
) -> tuple[ProviderEndpoint, ...]:
    blocked = {name.lower() for name in disabled}
    return tuple(p for p in providers if p.name.lower() not in blocked)
