"""Msgspec shapes for image enhancement and upload provider payloads."""

from __future__ import annotations

import re
from typing import Any

import msgspec

from ..normalize import first_text
from ..results import EnhancedUrl, UploadResult


class _Shape(msgspec.Struct, forbid_unknown_fields=False):
    pass


# Upscaling


class ResultUrl(_Shape):
    result: Any = None

    def to_result(self) -> EnhancedUrl | None:
        url = first_text(self.result)
        return EnhancedUrl(result_url=url) if url is not None else None


class _UrlHolder(_Shape):
    url: Any = None


class DataUrl(_Shape):
    data: _UrlHolder

    def to_result(self) -> EnhancedUrl | None:
        url = first_text(self.data.url)
        return EnhancedUrl(result_url=url) if url is not None else None


class _ImageUrlHolder(_Shape):
    imageUrl: Any = None


class ResultImageUrl(_Shape):
    result: _ImageUrlHolder

    def to_result(self) -> EnhancedUrl | None:
        url = first_text(self.result.imageUrl)
        return EnhancedUrl(result_url=url) if url is not None else None


# Background removal


class RemovedBackground(_Shape):
    result: Any = None
    data: Any = None
    output: Any = None

    def to_result(self) -> EnhancedUrl | None:
        nested = self.data.get("result") if isinstance(self.data, dict) else None
        url = first_text(self.result, nested, self.output)
        return EnhancedUrl(result_url=url) if url is not None else None


def strict_ok(payload: Any) -> bool:
    return isinstance(payload, dict) and (
        payload.get("success") is True or payload.get("status") is True
    )


# Uploads

_TMPFILES_PAGE_RE = re.compile(r"^(https?://tmpfiles\.org)/(?!dl/)")


def _http(value: Any) -> str | None:
    text = first_text(value)
    if text is None:
        return None
    text = text.strip()
    return text if text.startswith("http") else None


def plain_text_url(payload: Any) -> UploadResult | None:
    url = _http(payload)
    return UploadResult(url=url) if url is not None else None


class UploadedFiles(_Shape):
    files: list[_UrlHolder]

    def to_result(self) -> UploadResult | None:
        if not self.files:
            return None
        url = _http(self.files[0].url)
        return UploadResult(url=url) if url is not None else None


class DirectUrl(_Shape):
    direct_url: str

    def to_result(self) -> UploadResult | None:
        url = _http(self.direct_url)
        return UploadResult(url=url) if url is not None else None


class TmpfilesUpload(_Shape):
    data: _UrlHolder

    def to_result(self) -> UploadResult | None:
        url = _http(self.data.url)
        if url is None:
            return None
        return UploadResult(url=_TMPFILES_PAGE_RE.sub(r"\1/dl/", url))


class _HostedLink(_Shape):
    link: Any = None
    imageUrl: Any = None


class _HostedData(_Shape):
    result: _HostedLink


class VideyUpload(_Shape):
    data: _HostedData

    def to_result(self) -> UploadResult | None:
        url = _http(self.data.result.link)
        return UploadResult(url=url) if url is not None else None


class GoFileUpload(_Shape):
    data: _HostedData

    def to_result(self) -> UploadResult | None:
        url = _http(self.data.result.imageUrl)
        return UploadResult(url=url) if url is not None else None
