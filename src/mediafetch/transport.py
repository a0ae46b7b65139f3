from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

import httpx
import msgspec

from .constants import DEFAULT_USER_AGENT
from .logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status: int
    headers: dict[str, str] = field(default_factory=dict)
    content: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "").lower()

    def json(self) -> Any:
        return msgspec.json.decode(self.content)

    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


class Transport(Protocol):
    async def request(
        self,
        method: str,
        url: str,
        *,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        timeout_s: float | None = None,
    ) -> HttpResponse | None: ...


def default_headers(user_agent: str = DEFAULT_USER_AGENT) -> dict[str, str]:
    return {
        "User-Agent": user_agent,
        "Accept": "application/json,image/avif,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Cache-Control": "no-cache",
    }


class HttpTransport:
    def __init__(
        self,
        *,
        timeout_s: float = 30,
        user_agent: str = DEFAULT_USER_AGENT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout_s = timeout_s
        self._http_client = http_client or httpx.AsyncClient(
            timeout=timeout_s,
            follow_redirects=True,
            headers=default_headers(user_agent),
        )
        self._owns_http_client = http_client is None

    async def close(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> HttpTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        url: str,
        *,
        data: dict[str, Any] | None = None,
        files: dict[str, Any] | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        timeout_s: float | None = None,
    ) -> HttpResponse | None:
        timeout = timeout_s if timeout_s is not None else self._timeout_s
        logger.debug("transport.request", method=method, url=url)
        try:
            async with self._http_client.stream(
                method,
                url,
                data=data,
                files=files,
                content=content,
                headers=headers,
                timeout=timeout,
            ) as resp:
                chunks = [chunk async for chunk in resp.aiter_bytes()]
        except httpx.HTTPError as exc:
            logger.warning(
                "transport.network_error",
                method=method,
                url=url,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            return None
        except httpx.StreamError as exc:
            logger.warning(
                "transport.stream_error",
                method=method,
                url=url,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            return None

        body = b"".join(chunks)
        logger.debug(
            "transport.response",
            method=method,
            url=url,
            status=resp.status_code,
            size=len(body),
        )
        return HttpResponse(
            status=resp.status_code,
            headers={key.lower(): value for key, value in resp.headers.items()},
            content=body,
        )
