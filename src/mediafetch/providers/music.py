from __future__ import annotations

from collections.abc import Sequence

from ..fallback import resolve
from ..normalize import UseCase, shape_matcher
from ..results import Failure, TrackResult
from ..schemas import music
from ..transport import Transport
from . import ProviderEndpoint, ProviderRequest

NO_TRACK = (
    "No downloadable track found from any provider. The track may be "
    "unavailable, restricted, or the search query was invalid."
)

PLAY_PROVIDERS: tuple[ProviderEndpoint, ...] = (
    ProviderEndpoint("faa-ytplay", "https://api-faa.my.id/faa/ytplay?query={query}"),
    ProviderEndpoint(
        "ootaizumi-play",
        "https://api.ootaizumi.web.id/downloader/youtube/play?query={query}",
    ),
    ProviderEndpoint(
        "nekolabs-play",
        "https://api.nekolabs.web.id/downloader/youtube/play/v1?q={query}",
    ),
    ProviderEndpoint(
        "anabot-playmusic",
        "https://anabot.my.id/api/download/playmusic?query={query}&apikey=freeApikey",
    ),
    ProviderEndpoint(
        "elrayy-ytplay",
        "https://api.elrayyxml.web.id/api/downloader/ytplay?q={query}",
    ),
)

SPOTIFY_SEARCH_PROVIDERS: tuple[ProviderEndpoint, ...] = (
    ProviderEndpoint(
        "faa-spotify-play", "https://api-faa.my.id/faa/spotify-play?q={query}"
    ),
    ProviderEndpoint(
        "ootaizumi-spotifyplay",
        "https://api.ootaizumi.web.id/downloader/spotifyplay?query={query}",
    ),
    ProviderEndpoint(
        "nekolabs-spotify-play",
        "https://api.nekolabs.web.id/dwn/spotify/play/v1?q={query}",
    ),
    ProviderEndpoint(
        "kyyokatsu-spotify", "https://kyyokatsurestapi.my.id/search/spotify?q={query}"
    ),
)

PLAY: UseCase[TrackResult] = UseCase(
    name="music.play",
    matchers=(
        shape_matcher(music.MetadataPlay),
        shape_matcher(music.Mp3Play),
        shape_matcher(music.DownloadPlay),
        shape_matcher(music.NestedDataPlay),
        shape_matcher(music.FlatPlay),
    ),
    failure_message=NO_TRACK,
)

SPOTIFY_SEARCH: UseCase[TrackResult] = UseCase(
    name="music.spotify",
    matchers=(
        shape_matcher(music.InfoSpotify),
        shape_matcher(music.MetadataSpotify),
        shape_matcher(music.ArtistsSpotify),
        shape_matcher(music.AudioSpotify),
    ),
    failure_message=NO_TRACK,
)


async def play(
    query: str,
    *,
    transport: Transport,
    providers: Sequence[ProviderEndpoint] = PLAY_PROVIDERS,
) -> TrackResult | Failure:
    if not query.strip():
        return Failure(error="Search query is empty.")
    request = ProviderRequest(params={"query": query.strip()})
    return await resolve(providers, request, PLAY, transport=transport)


async def spotify_search(
    query: str,
    *,
    transport: Transport,
    providers: Sequence[ProviderEndpoint] = SPOTIFY_SEARCH_PROVIDERS,
) -> TrackResult | Failure:
    if not query.strip():
        return Failure(error="Search query is empty.")
    request = ProviderRequest(params={"query": query.strip()})
    return await resolve(providers, request, SPOTIFY_SEARCH, transport=transport)
