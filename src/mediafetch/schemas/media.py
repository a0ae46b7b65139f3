"""Msgspec shapes for link download provider payloads."""

from __future__ import annotations

from typing import Any, ClassVar

import msgspec

from ..normalize import first_text
from ..results import MediaKind, MediaResult


class _Shape(msgspec.Struct, forbid_unknown_fields=False):
    pass


def _dedupe(urls: list[str]) -> list[str]:
    return list(dict.fromkeys(urls))


def _http_links(values: Any) -> list[str]:
    if not isinstance(values, list):
        return []
    return [v for v in values if isinstance(v, str) and v.startswith("http")]


def _first_truthy(*values: Any) -> Any:
    for value in values:
        if value:
            return value
    return None


def _nested(value: Any, key: str) -> Any:
    return value.get(key) if isinstance(value, dict) else None


# TikTok


class _TikTokMedia(_Shape):
    images: Any = None
    image: Any = None
    data: Any = None
    play: Any = None
    video: Any = None
    videoUrl: Any = None
    hdplay: Any = None
    title: Any = None


class _TikTokPayload(_Shape):
    data: Any = None
    result: Any = None

    def media(self) -> _TikTokMedia | None:
        container = _first_truthy(_nested(self.data, "result"), self.result, self.data)
        if not isinstance(container, dict):
            return None
        try:
            return msgspec.convert(container, type=_TikTokMedia)
        except msgspec.ValidationError:
            return None


class TikTokImages(_TikTokPayload):
    def to_result(self) -> MediaResult | None:
        media = self.media()
        if media is None:
            return None
        for candidate in (media.images, media.image, media.data):
            if isinstance(candidate, list) and candidate:
                links = _http_links(candidate)
                if links:
                    return MediaResult(
                        kind="images", urls=links, title=first_text(media.title)
                    )
                return None
        return None


class TikTokVideo(_TikTokPayload):
    def to_result(self) -> MediaResult | None:
        media = self.media()
        if media is None:
            return None
        video_url = first_text(
            media.play, media.video, media.videoUrl, media.hdplay, media.data
        )
        if video_url is None:
            return None
        return MediaResult(kind="video", urls=[video_url], title=first_text(media.title))


# Instagram


class _IgMedia(_Shape):
    media: Any = None
    isVideo: Any = None


class IgVideo(_Shape):
    result: _IgMedia

    def to_result(self) -> MediaResult | None:
        media = self.result.media
        if self.result.isVideo is True and first_text(media):
            return MediaResult(kind="video", urls=[media])
        return None


class IgImages(_Shape):
    result: _IgMedia

    def to_result(self) -> MediaResult | None:
        media = self.result.media
        if self.result.isVideo is not False or not isinstance(media, list):
            return None
        links = [v for v in media if first_text(v)]
        if not links:
            return None
        return MediaResult(kind="images", urls=_dedupe(links))


class _IgPayload(_Shape):
    result: Any = None
    data: Any = None

    def raw(self) -> Any:
        return _first_truthy(self.result, _nested(self.data, "result"), self.data)


class IgItemList(_IgPayload):
    """Lists of ``{videoUrl}`` / ``{imageUrl}`` objects."""

    def to_result(self) -> MediaResult | None:
        raw = self.raw()
        if not isinstance(raw, list) or not raw:
            return None
        if not all(
            isinstance(item, dict) and ("videoUrl" in item or "imageUrl" in item)
            for item in raw
        ):
            return None
        videos = [item["videoUrl"] for item in raw if first_text(item.get("videoUrl"))]
        images = [item["imageUrl"] for item in raw if first_text(item.get("imageUrl"))]
        if len(videos) == 1 and not images:
            return MediaResult(kind="video", urls=videos)
        if images:
            return MediaResult(kind="images", urls=_dedupe(images))
        return None


class IgUrlList(_IgPayload):
    def to_result(self) -> MediaResult | None:
        raw = self.raw()
        if not isinstance(raw, list):
            return None
        urls = [
            item["url"]
            for item in raw
            if isinstance(item, dict) and first_text(item.get("url"))
        ]
        if not urls:
            return None
        unique = _dedupe(urls)
        return MediaResult(kind="video" if len(unique) == 1 else "images", urls=unique)


class IgSingle(_IgPayload):
    def to_result(self) -> MediaResult | None:
        raw = self.raw()
        if not isinstance(raw, dict):
            return None
        url = first_text(raw.get("url"), raw.get("downloadUrl"))
        if url is None:
            return None
        return MediaResult(kind="video", urls=[url])


# YouTube and Spotify links


class _DownloadLinks(_Shape):
    downloadUrl: Any = None
    download: Any = None
    download_url: Any = None
    mp4: Any = None
    url: Any = None
    type: Any = None
    format: Any = None
    title: Any = None
    res_data: Any = None


class YouTubeAudio(_Shape):
    result: _DownloadLinks

    def to_result(self) -> MediaResult | None:
        r = self.result
        url = first_text(r.downloadUrl, r.download, r.url)
        if url is None:
            return None
        return MediaResult(kind="audio", urls=[url], title=first_text(r.title))


class YouTubeVideo(_Shape):
    result: _DownloadLinks

    def to_result(self) -> MediaResult | None:
        r = self.result
        url = first_text(r.downloadUrl, r.download_url, r.mp4, r.url)
        is_video = (
            r.type == "video"
            or r.format == "mp4"
            or first_text(r.mp4, r.url) is not None
        )
        if url is None or not is_video:
            return None
        return MediaResult(kind="video", urls=[url], title=first_text(r.title))


class SpotifyTrack(_Shape):
    result: _DownloadLinks

    def to_result(self) -> MediaResult | None:
        r = self.result
        formats = _nested(r.res_data, "formats")
        first_format = formats[0] if isinstance(formats, list) and formats else None
        url = first_text(r.downloadUrl, r.download, r.url, _nested(first_format, "url"))
        if url is None:
            return None
        return MediaResult(kind="audio", urls=[url], title=first_text(r.title))


# Single-endpoint hosts


_KIND_ALIASES: dict[str, MediaKind] = {
    "video": "video",
    "image": "images",
    "images": "images",
    "photo": "images",
    "audio": "audio",
}


def _links(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value] if value.startswith("http") else []
    if isinstance(value, list):
        links: list[str] = []
        for item in value:
            links.extend(_links(item))
        return links
    if isinstance(value, dict):
        for key in (
            "download_url",
            "downloadUrl",
            "download",
            "url",
            "link",
            "medias",
            "media",
        ):
            found = _links(value.get(key))
            if found:
                return found
    return []


class HostLinks(_Shape):
    result: Any = None

    kind: ClassVar[MediaKind] = "file"

    def to_result(self) -> MediaResult | None:
        links = _dedupe(_links(self.result))
        if not links:
            return None
        kind = self.kind
        title = None
        if isinstance(self.result, dict):
            declared = self.result.get("type")
            if isinstance(declared, str):
                kind = _KIND_ALIASES.get(declared.lower(), kind)
            title = first_text(
                self.result.get("title"),
                self.result.get("filename"),
                self.result.get("name"),
            )
        return MediaResult(kind=kind, urls=links, title=title)


class VideoLinks(HostLinks):
    kind: ClassVar[MediaKind] = "video"


class ImageLinks(HostLinks):
    kind: ClassVar[MediaKind] = "images"


class AudioLinks(HostLinks):
    kind: ClassVar[MediaKind] = "audio"


class FileLinks(HostLinks):
    kind: ClassVar[MediaKind] = "file"
