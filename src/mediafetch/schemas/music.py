"""Msgspec shapes for music search provider payloads."""

from __future__ import annotations

from typing import Any

import msgspec

from ..normalize import first_text
from ..results import (
    UNKNOWN_ARTIST,
    UNKNOWN_CHANNEL,
    UNKNOWN_TITLE,
    UNKNOWN_TRACK,
    TrackResult,
)


class _Shape(msgspec.Struct, forbid_unknown_fields=False):
    pass


# YouTube music search


class PlayMetadata(_Shape):
    title: str | None = None
    channel: str | None = None
    cover: str | None = None
    url: str | None = None


class _MetadataResult(_Shape):
    downloadUrl: str
    metadata: PlayMetadata


class MetadataPlay(_Shape):
    result: _MetadataResult

    def to_result(self) -> TrackResult | None:
        download_url = first_text(self.result.downloadUrl)
        if download_url is None:
            return None
        meta = self.result.metadata
        return TrackResult(
            title=first_text(meta.title) or UNKNOWN_TITLE,
            channel=first_text(meta.channel) or UNKNOWN_ARTIST,
            cover=first_text(meta.cover),
            url=first_text(meta.url),
            download_url=download_url,
        )


class _Mp3Result(_Shape):
    mp3: str
    title: str
    author: str | None = None
    thumbnail: str | None = None
    url: str | None = None


class Mp3Play(_Shape):
    result: _Mp3Result

    def to_result(self) -> TrackResult | None:
        r = self.result
        if first_text(r.mp3) is None or first_text(r.title) is None:
            return None
        return TrackResult(
            title=r.title,
            channel=first_text(r.author) or UNKNOWN_ARTIST,
            cover=first_text(r.thumbnail),
            url=first_text(r.url),
            download_url=r.mp3,
        )


class _Author(_Shape):
    name: str | None = None


class _DownloadResult(_Shape):
    download: str
    title: str
    author: _Author | None = None
    thumbnail: str | None = None
    image: str | None = None
    url: str | None = None


class DownloadPlay(_Shape):
    result: _DownloadResult

    def to_result(self) -> TrackResult | None:
        r = self.result
        if first_text(r.download) is None or first_text(r.title) is None:
            return None
        author = r.author.name if r.author is not None else None
        return TrackResult(
            title=r.title,
            channel=first_text(author) or UNKNOWN_CHANNEL,
            cover=first_text(r.thumbnail, r.image),
            url=first_text(r.url),
            download_url=r.download,
        )


class _AnaMetadata(_Shape):
    title: str | None = None
    channel: str | None = None
    thumbnail: str | None = None
    webpage_url: str | None = None


class _AnaResult(_Shape):
    success: bool
    urls: str
    metadata: _AnaMetadata


class _AnaData(_Shape):
    result: _AnaResult


class NestedDataPlay(_Shape):
    data: _AnaData

    def to_result(self) -> TrackResult | None:
        r = self.data.result
        if not r.success or first_text(r.urls) is None:
            return None
        meta = r.metadata
        return TrackResult(
            title=first_text(meta.title) or UNKNOWN_TITLE,
            channel=first_text(meta.channel) or UNKNOWN_CHANNEL,
            cover=first_text(meta.thumbnail),
            url=first_text(meta.webpage_url),
            download_url=r.urls,
        )


class _FlatResult(_Shape):
    download_url: str
    title: str
    channel: str
    thumbnail: str
    url: str


class FlatPlay(_Shape):
    result: _FlatResult

    def to_result(self) -> TrackResult | None:
        r = self.result
        if not all(first_text(v) for v in (r.download_url, r.title, r.channel, r.thumbnail, r.url)):
            return None
        return TrackResult(
            title=r.title,
            channel=r.channel,
            cover=r.thumbnail,
            url=r.url,
            download_url=r.download_url,
        )


# Spotify search


def parse_clock_ms(value: Any) -> int:
    """Parse ``m:ss`` into milliseconds; anything else is 0."""
    if not isinstance(value, str):
        return 0
    parts = value.split(":")
    if len(parts) != 2:
        return 0
    try:
        minutes, seconds = int(parts[0]), int(parts[1])
    except ValueError:
        return 0
    return (minutes * 60 + seconds) * 1000


def _as_ms(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    return 0


class _SpotifyInfo(_Shape):
    title: str | None = None
    artist: str | None = None
    duration: str | None = None
    spotify_url: str | None = None
    thumbnail: str | None = None


class _SpotifyDownload(_Shape):
    url: str


class InfoSpotify(_Shape):
    info: _SpotifyInfo
    download: _SpotifyDownload

    def to_result(self) -> TrackResult | None:
        if first_text(self.download.url) is None:
            return None
        info = self.info
        return TrackResult(
            title=first_text(info.title) or UNKNOWN_TRACK,
            channel=first_text(info.artist) or UNKNOWN_ARTIST,
            cover=first_text(info.thumbnail),
            url=first_text(info.spotify_url),
            duration_ms=parse_clock_ms(info.duration),
            download_url=self.download.url,
        )


class _SpotifyMetadata(_Shape):
    title: str | None = None
    artist: str | None = None
    cover: str | None = None
    url: str | None = None
    duration: Any = None


class _SpotifyMetadataResult(_Shape):
    downloadUrl: str
    metadata: _SpotifyMetadata


class MetadataSpotify(_Shape):
    result: _SpotifyMetadataResult

    def to_result(self) -> TrackResult | None:
        download_url = first_text(self.result.downloadUrl)
        if download_url is None:
            return None
        meta = self.result.metadata
        return TrackResult(
            title=first_text(meta.title) or UNKNOWN_TRACK,
            channel=first_text(meta.artist) or UNKNOWN_ARTIST,
            cover=first_text(meta.cover),
            url=first_text(meta.url),
            duration_ms=_as_ms(meta.duration),
            download_url=download_url,
        )


class _ArtistsResult(_Shape):
    download: str
    title: str
    artists: str
    image: str
    external_url: str
    duration_ms: Any = None


class ArtistsSpotify(_Shape):
    result: _ArtistsResult

    def to_result(self) -> TrackResult | None:
        r = self.result
        if not all(first_text(v) for v in (r.download, r.title, r.artists, r.image, r.external_url)):
            return None
        return TrackResult(
            title=r.title,
            channel=r.artists,
            cover=r.image,
            url=r.external_url,
            duration_ms=_as_ms(r.duration_ms),
            download_url=r.download,
        )


class _AudioResult(_Shape):
    audio: str
    title: str
    artist: str
    thumbnail: str
    url: str


class AudioSpotify(_Shape):
    result: _AudioResult

    def to_result(self) -> TrackResult | None:
        r = self.result
        if not all(first_text(v) for v in (r.audio, r.title, r.artist, r.thumbnail, r.url)):
            return None
        return TrackResult(
            title=r.title,
            channel=r.artist,
            cover=r.thumbnail,
            url=r.url,
            download_url=r.audio,
        )
