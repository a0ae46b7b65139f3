from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from ..classify import Extraction, ServiceTag, classify
from ..fallback import resolve
from ..normalize import UseCase, shape_matcher
from ..results import Failure, MediaResult
from ..schemas import media
from ..transport import Transport
from . import ProviderEndpoint, ProviderRequest, without_disabled

UNSUPPORTED_LINK = "No supported link found in the message."


def _endpoint(name: str, template: str) -> ProviderEndpoint:
    return ProviderEndpoint(name, template)


@dataclass(frozen=True, slots=True)
class DownloadRoute:
    providers: tuple[ProviderEndpoint, ...]
    use_case: UseCase[MediaResult]


TIKTOK = DownloadRoute(
    providers=(
        _endpoint("tikwm", "https://tikwm.com/api/?url={url}"),
        _endpoint("nekolabs-tiktok", "https://api.nekolabs.web.id/downloader/tiktok?url={url}"),
        _endpoint(
            "elrayy-tiktok", "https://api.elrayyxml.web.id/api/downloader/tiktok?url={url}"
        ),
        _endpoint(
            "ootaizumi-tiktok", "https://api.ootaizumi.web.id/downloader/tiktok?url={url}"
        ),
        _endpoint(
            "anabot-tiktok",
            "https://anabot.my.id/api/download/tiktok?url={url}&apikey=freeApikey",
        ),
    ),
    use_case=UseCase(
        name="download.tiktok",
        matchers=(
            shape_matcher(media.TikTokImages),
            shape_matcher(media.TikTokVideo),
        ),
        failure_message=(
            "No downloadable media found. The TikTok may be private, removed, "
            "region-restricted, or the link may be invalid."
        ),
    ),
)

INSTAGRAM = DownloadRoute(
    providers=(
        _endpoint(
            "nekolabs-instagram", "https://api.nekolabs.web.id/downloader/instagram?url={url}"
        ),
        _endpoint(
            "elrayy-instagram",
            "https://api.elrayyxml.web.id/api/downloader/instagram?url={url}",
        ),
        _endpoint(
            "zenzxz-instagram", "https://api.zenzxz.my.id/api/downloader/instagram?url={url}"
        ),
        _endpoint(
            "anabot-instagram",
            "https://anabot.my.id/api/download/instagram?url={url}&apikey=freeApikey",
        ),
        _endpoint(
            "ootaizumi-instagram",
            "https://api.ootaizumi.web.id/downloader/instagram?url={url}",
        ),
    ),
    use_case=UseCase(
        name="download.instagram",
        matchers=(
            shape_matcher(media.IgVideo),
            shape_matcher(media.IgImages),
            shape_matcher(media.IgItemList),
            shape_matcher(media.IgUrlList),
            shape_matcher(media.IgSingle),
        ),
        failure_message=(
            "No downloadable media found. The post may be private, removed, "
            "or in an unsupported format."
        ),
    ),
)

YOUTUBE_AUDIO = DownloadRoute(
    providers=(
        _endpoint("nekolabs-youtube", "https://api.nekolabs.web.id/downloader/youtube/v1?url={url}"),
        _endpoint(
            "ootaizumi-youtube",
            "https://api.ootaizumi.web.id/downloader/youtube?url={url}&format=mp3",
        ),
        _endpoint("elrayy-ytmp3", "https://api.elrayyxml.web.id/api/downloader/ytmp3?url={url}"),
        _endpoint("nexray-ytmp3", "https://api.nexray.web.id/downloader/ytmp3?url={url}"),
    ),
    use_case=UseCase(
        name="download.youtube_audio",
        matchers=(shape_matcher(media.YouTubeAudio),),
        failure_message=(
            "Failed to retrieve audio from the provided YouTube link. The video "
            "may be private, age-restricted, too long, or copyright-protected."
        ),
    ),
)

YOUTUBE_VIDEO = DownloadRoute(
    providers=(
        _endpoint(
            "nekolabs-youtube-720",
            "https://api.nekolabs.web.id/downloader/youtube/v1?url={url}&format=720",
        ),
        _endpoint("faa-ytmp4", "https://api-faa.my.id/faa/ytmp4?url={url}"),
        _endpoint("kyyokatsu-ytmp4", "https://api.kyyokatsu.my.id/api/downloader/ytmp4?url={url}"),
        _endpoint("rikishop-ytmp4", "https://api.rikishop.my.id/download/ytmp4?url={url}"),
    ),
    use_case=UseCase(
        name="download.youtube_video",
        matchers=(shape_matcher(media.YouTubeVideo),),
        failure_message=(
            "Failed to retrieve video. The link may point to audio-only content; "
            "try the audio download instead."
        ),
    ),
)

SPOTIFY = DownloadRoute(
    providers=(
        _endpoint("nexray-spotify", "https://api.nexray.web.id/downloader/spotify?url={url}"),
        _endpoint("nekolabs-spotify", "https://api.nekolabs.web.id/downloader/spotify/v1?url={url}"),
        _endpoint("ootaizumi-spotify", "https://api.ootaizumi.web.id/downloader/spotify?url={url}"),
        _endpoint("elrayy-spotify", "https://api.elrayyxml.web.id/api/downloader/spotify?url={url}"),
        _endpoint("rikishop-spotify", "https://api.rikishop.my.id/download/spotify?url={url}"),
    ),
    use_case=UseCase(
        name="download.spotify",
        matchers=(shape_matcher(media.SpotifyTrack),),
        failure_message=(
            "Failed to retrieve audio from the provided Spotify link. The track "
            "may be unavailable, region-restricted, or the link may be invalid."
        ),
    ),
)


def _single_host(
    tag: ServiceTag, name: str, template: str, shape: type[media.HostLinks], label: str
) -> DownloadRoute:
    return DownloadRoute(
        providers=(_endpoint(name, template),),
        use_case=UseCase(
            name=f"download.{tag.name.lower()}",
            matchers=(shape_matcher(shape),),
            failure_message=f"Failed to download from {label}. The link may be private or invalid.",
        ),
    )


DOWNLOAD_ROUTES: Mapping[ServiceTag, DownloadRoute] = {
    ServiceTag.TIKTOK: TIKTOK,
    ServiceTag.INSTAGRAM: INSTAGRAM,
    ServiceTag.PINTEREST: _single_host(
        ServiceTag.PINTEREST,
        "faa-pin-down",
        "https://api-faa.my.id/faa/pin-down?url={url}",
        media.ImageLinks,
        "Pinterest",
    ),
    ServiceTag.FACEBOOK: _single_host(
        ServiceTag.FACEBOOK,
        "faa-fbdownload",
        "https://api-faa.my.id/faa/fbdownload?url={url}",
        media.VideoLinks,
        "Facebook",
    ),
    ServiceTag.TWITTER: _single_host(
        ServiceTag.TWITTER,
        "nexray-twitter",
        "https://api.nexray.web.id/downloader/twitter?url={url}",
        media.VideoLinks,
        "Twitter/X",
    ),
    ServiceTag.VIDEY: _single_host(
        ServiceTag.VIDEY,
        "nexray-videy",
        "https://api.nexray.web.id/downloader/videy?url={url}",
        media.VideoLinks,
        "Videy",
    ),
    ServiceTag.THREADS: _single_host(
        ServiceTag.THREADS,
        "nexray-threads",
        "https://api.nexray.web.id/downloader/threads?url={url}",
        media.ImageLinks,
        "Threads",
    ),
    ServiceTag.MEGA: _single_host(
        ServiceTag.MEGA,
        "nexray-mega",
        "https://api.nexray.web.id/downloader/mega?url={url}",
        media.FileLinks,
        "Mega",
    ),
    ServiceTag.SOUNDCLOUD: _single_host(
        ServiceTag.SOUNDCLOUD,
        "nexray-soundcloud",
        "https://api.nexray.web.id/downloader/soundcloud?url={url}",
        media.AudioLinks,
        "SoundCloud",
    ),
    ServiceTag.SPOTIFY: SPOTIFY,
    ServiceTag.YOUTUBE: YOUTUBE_AUDIO,
    ServiceTag.SFILE: _single_host(
        ServiceTag.SFILE,
        "nexray-sfile",
        "https://api.nexray.web.id/downloader/sfile?url={url}",
        media.FileLinks,
        "Sfile",
    ),
    ServiceTag.MEDIAFIRE: _single_host(
        ServiceTag.MEDIAFIRE,
        "faa-mediafire",
        "https://api-faa.my.id/faa/mediafire?url={url}",
        media.FileLinks,
        "MediaFire",
    ),
}


async def fetch_route(
    route: DownloadRoute,
    url: str,
    *,
    transport: Transport,
    disabled: Iterable[str] = (),
) -> MediaResult | Failure:
    providers: Sequence[ProviderEndpoint] = without_disabled(route.providers, disabled)
    request = ProviderRequest(params={"url": url})
    return await resolve(providers, request, route.use_case, transport=transport)


async def download(
    text: str | None,
    *,
    transport: Transport,
    prefer_video: bool = False,
    disabled: Iterable[str] = (),
) -> MediaResult | Failure:
    """Classify ``text`` and fetch the linked media through its route."""
    extraction: Extraction | None = classify(text)
    if extraction is None:
        return Failure(error=UNSUPPORTED_LINK)
    route = DOWNLOAD_ROUTES[extraction.type]
    if prefer_video and extraction.type is ServiceTag.YOUTUBE:
        route = YOUTUBE_VIDEO
    return await fetch_route(
        route, extraction.url, transport=transport, disabled=disabled
    )


async def tiktok(
    url: str, *, transport: Transport, disabled: Iterable[str] = ()
) -> MediaResult | Failure:
    return await fetch_route(TIKTOK, url, transport=transport, disabled=disabled)


async def instagram(
    url: str, *, transport: Transport, disabled: Iterable[str] = ()
) -> MediaResult | Failure:
    return await fetch_route(INSTAGRAM, url, transport=transport, disabled=disabled)


async def youtube_audio(
    url: str, *, transport: Transport, disabled: Iterable[str] = ()
) -> MediaResult | Failure:
    return await fetch_route(
        YOUTUBE_AUDIO, url, transport=transport, disabled=disabled
    )


async def youtube_video(
    url: str, *, transport: Transport, disabled: Iterable[str] = ()
) -> MediaResult | Failure:
    return await fetch_route(
        YOUTUBE_VIDEO, url, transport=transport, disabled=disabled
    )


async def spotify_track(
    url: str, *, transport: Transport, disabled: Iterable[str] = ()
) -> MediaResult | Failure:
    return await fetch_route(SPOTIFY, url, transport=transport, disabled=disabled)
