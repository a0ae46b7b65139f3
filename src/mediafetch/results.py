"""Canonical results returned by every resolver.

Callers only ever see these structs; which provider produced a result is not
part of the contract.
"""

from __future__ import annotations

from typing import Literal

import msgspec

UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_TRACK = "Unknown Track"
UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_CHANNEL = "Unknown Channel"

MediaKind = Literal["video", "images", "audio", "file"]


class _Result(msgspec.Struct, frozen=True, kw_only=True, rename="camel"):
    pass


class Failure(_Result, frozen=True, kw_only=True, rename="camel"):
    success: Literal[False] = False
    error: str


class TrackResult(_Result, frozen=True, kw_only=True, rename="camel"):
    success: Literal[True] = True
    title: str = UNKNOWN_TITLE
    channel: str = UNKNOWN_ARTIST
    cover: str | None = None
    url: str | None = None
    download_url: str
    duration_ms: int = 0


class MediaResult(_Result, frozen=True, kw_only=True, rename="camel"):
    success: Literal[True] = True
    kind: MediaKind
    urls: list[str]
    title: str | None = None


class EnhancedUrl(_Result, frozen=True, kw_only=True, rename="camel"):
    success: Literal[True] = True
    result_url: str


class EnhancedBuffer(_Result, frozen=True, kw_only=True, rename="camel"):
    success: Literal[True] = True
    result_buffer: bytes


class UploadResult(_Result, frozen=True, kw_only=True, rename="camel"):
    success: Literal[True] = True
    url: str


type EnhanceResult = EnhancedUrl | EnhancedBuffer
