"""Link classification for the supported content platforms."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum


class ServiceTag(StrEnum):
    TIKTOK = "tt"
    INSTAGRAM = "ig"
    PINTEREST = "pin"
    FACEBOOK = "fb"
    TWITTER = "tw"
    VIDEY = "vd"
    THREADS = "th"
    MEGA = "mg"
    SOUNDCLOUD = "sc"
    SPOTIFY = "sp"
    YOUTUBE = "yt"
    SFILE = "sf"
    MEDIAFIRE = "mf"


@dataclass(frozen=True, slots=True)
class Extraction:
    type: ServiceTag
    url: str


@dataclass(frozen=True, slots=True)
class ServicePattern:
    tag: ServiceTag
    pattern: re.Pattern[str]
    reject: Callable[[str], bool] | None = None


def _is_story(url: str) -> bool:
    return "/stories/" in url


def _is_facebook_chrome(url: str) -> bool:
    return any(part in url for part in ("/login", "/dialog", "/plugins/"))


def _url_re(host: str) -> re.Pattern[str]:
    return re.compile(rf"https?://{host}/\S+", re.IGNORECASE)


# Priority order: the first pattern that matches decides the outcome.
SERVICE_PATTERNS: tuple[ServicePattern, ...] = (
    ServicePattern(ServiceTag.TIKTOK, _url_re(r"(?:www\.)?(?:vm\.|vt\.|m\.)?tiktok\.com")),
    ServicePattern(
        ServiceTag.INSTAGRAM,
        _url_re(r"(?:www\.)?instagram\.com"),
        reject=_is_story,
    ),
    ServicePattern(
        ServiceTag.PINTEREST,
        _url_re(
            r"(?:www\.)?(?:pinterest\.(?:com|fr|de|co\.uk|jp|ru|ca|it|com\.au"
            r"|com\.mx|com\.br|es|pl)|pin\.it)"
        ),
    ),
    ServicePattern(
        ServiceTag.FACEBOOK,
        _url_re(r"(?:www\.|m\.|web\.)?facebook\.com"),
        reject=_is_facebook_chrome,
    ),
    ServicePattern(ServiceTag.TWITTER, _url_re(r"(?:www\.)?(?:twitter\.com|x\.com)")),
    ServicePattern(ServiceTag.VIDEY, _url_re(r"(?:www\.)?videy\.co")),
    ServicePattern(ServiceTag.THREADS, _url_re(r"(?:www\.)?threads\.(?:net|com)")),
    ServicePattern(ServiceTag.MEGA, _url_re(r"mega\.nz")),
    ServicePattern(ServiceTag.SOUNDCLOUD, _url_re(r"(?:www\.|on\.)?soundcloud\.com")),
    ServicePattern(ServiceTag.SPOTIFY, _url_re(r"open\.spotify\.com")),
    ServicePattern(
        ServiceTag.YOUTUBE,
        re.compile(
            r"https?://(?:www\.)?(?:youtube\.com/watch\?v=|youtu\.be/)\S+",
            re.IGNORECASE,
        ),
    ),
    ServicePattern(ServiceTag.SFILE, _url_re(r"sfile\.co")),
    ServicePattern(ServiceTag.MEDIAFIRE, _url_re(r"(?:www\.)?mediafire\.com")),
)

_TRAILING_PUNCTUATION = ".,!?"

_MEDIA_URL_RE = re.compile(
    r"^https?://.+\.(?:jpe?g|png|gif|mp4|webm|mkv|mov)$", re.IGNORECASE
)


def _clean(match: str) -> str:
    if match and match[-1] in _TRAILING_PUNCTUATION:
        return match[:-1]
    return match


def classify(
    text: str | None,
    patterns: tuple[ServicePattern, ...] = SERVICE_PATTERNS,
) -> Extraction | None:
    if not text:
        return None
    for entry in patterns:
        match = entry.pattern.search(text)
        if match is None:
            continue
        url = _clean(match.group(0))
        if entry.reject is not None and entry.reject(url):
            return None
        return Extraction(type=entry.tag, url=url)
    return None


def is_media_url(text: str | None) -> bool:
    return bool(text) and _MEDIA_URL_RE.match(text.strip()) is not None
