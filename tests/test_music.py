from __future__ import annotations

import pytest

from mediafetch.normalize import ParsedResponse, normalize
from mediafetch.providers import ProviderEndpoint
from mediafetch.providers.music import (
    NO_TRACK,
    PLAY,
    PLAY_PROVIDERS,
    SPOTIFY_SEARCH,
    play,
    spotify_search,
)
from mediafetch.results import Failure, TrackResult
from mediafetch.schemas.music import parse_clock_ms
from tests.fakes import FakeTransport, json_response


def _json(payload: object) -> ParsedResponse:
    return ParsedResponse("json", payload, "application/json")


@pytest.mark.anyio
async def test_play_skips_timeouts_and_defaults_missing_artist() -> None:
    providers = (
        ProviderEndpoint("one", "https://one.example/?q={query}"),
        ProviderEndpoint("two", "https://two.example/?q={query}"),
        ProviderEndpoint("three", "https://three.example/?q={query}"),
    )
    transport = FakeTransport(
        {
            "one.example": None,
            "two.example": None,
            "three.example": json_response(
                {"result": {"mp3": "https://cdn.example/x.mp3", "title": "X"}}
            ),
        }
    )

    result = await play("x", transport=transport, providers=providers)

    assert result == TrackResult(
        title="X",
        channel="Unknown Artist",
        cover=None,
        url=None,
        download_url="https://cdn.example/x.mp3",
    )
    assert len(transport.calls) == 3


@pytest.mark.anyio
async def test_play_uses_default_providers_in_order() -> None:
    transport = FakeTransport()

    result = await play("some song", transport=transport)

    assert result == Failure(error=NO_TRACK)
    assert len(transport.urls) == len(PLAY_PROVIDERS)
    assert transport.urls[0] == "https://api-faa.my.id/faa/ytplay?query=some%20song"
    assert "anabot.my.id" in transport.urls[3]


@pytest.mark.anyio
async def test_play_rejects_blank_query_without_requests() -> None:
    transport = FakeTransport()

    result = await play("   ", transport=transport)

    assert isinstance(result, Failure)
    assert transport.calls == []


def test_metadata_shape_wins_over_overlapping_shapes() -> None:
    payload = {
        "status": True,
        "result": {
            "downloadUrl": "https://cdn.example/a.mp3",
            "metadata": {"title": "Meta", "channel": "Chan", "cover": "c.jpg"},
            "mp3": "https://cdn.example/b.mp3",
            "title": "Other",
        },
    }

    result = normalize(_json(payload), PLAY)

    assert isinstance(result, TrackResult)
    assert result.title == "Meta"
    assert result.channel == "Chan"
    assert result.cover == "c.jpg"
    assert result.download_url == "https://cdn.example/a.mp3"


def test_download_shape_reads_author_name_and_image_fallback() -> None:
    payload = {
        "success": True,
        "result": {
            "download": "https://cdn.example/d.mp3",
            "title": "Song",
            "author": {"name": None},
            "image": "https://img.example/i.jpg",
        },
    }

    result = normalize(_json(payload), PLAY)

    assert result == TrackResult(
        title="Song",
        channel="Unknown Channel",
        cover="https://img.example/i.jpg",
        download_url="https://cdn.example/d.mp3",
    )


def test_nested_data_shape() -> None:
    payload = {
        "success": True,
        "data": {
            "result": {
                "success": True,
                "urls": "https://cdn.example/n.mp3",
                "metadata": {"title": "Nested", "webpage_url": "https://yt/1"},
            }
        },
    }

    result = normalize(_json(payload), PLAY)

    assert isinstance(result, TrackResult)
    assert result.title == "Nested"
    assert result.url == "https://yt/1"
    assert result.download_url == "https://cdn.example/n.mp3"


def test_flat_shape_requires_every_field() -> None:
    partial = {
        "status": True,
        "result": {
            "download_url": "https://cdn.example/f.mp3",
            "title": "Flat",
            "channel": "",
            "thumbnail": "t.jpg",
            "url": "https://yt/2",
        },
    }

    assert isinstance(normalize(_json(partial), PLAY), Failure)

    partial["result"]["channel"] = "Chan"
    result = normalize(_json(partial), PLAY)
    assert isinstance(result, TrackResult)
    assert result.channel == "Chan"


def test_explicit_failure_envelope_is_not_a_match() -> None:
    payload = {"success": False, "result": {"mp3": "https://cdn/x.mp3", "title": "X"}}

    assert isinstance(normalize(_json(payload), PLAY), Failure)


def test_spotify_info_shape_parses_duration() -> None:
    payload = {
        "status": True,
        "info": {"title": "T", "artist": "A", "duration": "3:25"},
        "download": {"url": "https://cdn.example/s.mp3"},
    }

    result = normalize(_json(payload), SPOTIFY_SEARCH)

    assert isinstance(result, TrackResult)
    assert result.duration_ms == 205_000
    assert result.channel == "A"


def test_spotify_shapes_in_order() -> None:
    artists = {
        "status": True,
        "result": {
            "download": "https://cdn.example/o.mp3",
            "title": "Oota",
            "artists": "Band",
            "image": "https://img/o.jpg",
            "external_url": "https://open.spotify.com/track/1",
            "duration_ms": 1234,
        },
    }
    audio = {
        "status": True,
        "result": {
            "audio": "https://cdn.example/k.mp3",
            "title": "Kyy",
            "artist": "Solo",
            "thumbnail": "https://img/k.jpg",
            "url": "https://open.spotify.com/track/2",
        },
    }

    first = normalize(_json(artists), SPOTIFY_SEARCH)
    second = normalize(_json(audio), SPOTIFY_SEARCH)

    assert isinstance(first, TrackResult)
    assert first.duration_ms == 1234
    assert first.channel == "Band"
    assert isinstance(second, TrackResult)
    assert second.download_url == "https://cdn.example/k.mp3"
    assert second.duration_ms == 0


@pytest.mark.anyio
async def test_spotify_search_metadata_defaults() -> None:
    transport = FakeTransport(
        {
            "api-faa.my.id": json_response({"status": False}),
            "ootaizumi": json_response(
                {
                    "success": True,
                    "result": {
                        "downloadUrl": "https://cdn.example/m.mp3",
                        "metadata": {"duration": 99000},
                    },
                }
            ),
        }
    )

    result = await spotify_search("track", transport=transport)

    assert result == TrackResult(
        title="Unknown Track",
        channel="Unknown Artist",
        download_url="https://cdn.example/m.mp3",
        duration_ms=99000,
    )


@pytest.mark.parametrize(
    ("value", "expected"),
    [("1:05", 65_000), ("0:00", 0), ("1:02:03", 0), ("abc", 0), (None, 0)],
)
def test_parse_clock_ms(value: object, expected: int) -> None:
    assert parse_clock_ms(value) == expected
