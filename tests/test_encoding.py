from __future__ import annotations

import pytest

from mediafetch.encoding import (
    EncodeState,
    EncodingAttempt,
    StickerOptions,
    encode_sticker,
    encode_under_budget,
    next_attempt,
)


class _Encoder:
    """Returns one scripted output (or raises it) per call."""

    def __init__(self, *outputs: bytes | Exception) -> None:
        self.outputs = list(outputs)
        self.seen: list[StickerOptions] = []

    async def __call__(self, content: bytes, options: StickerOptions) -> bytes:
        self.seen.append(options)
        output = self.outputs.pop(0)
        if isinstance(output, Exception):
            raise output
        return output


def _tried(encoder: _Encoder) -> list[tuple[int, int]]:
    return [(opt.quality, opt.frame_rate) for opt in encoder.seen]


@pytest.mark.anyio
async def test_first_attempt_that_fits_wins() -> None:
    encoder = _Encoder(b"x" * 10)

    outcome = await encode_sticker(b"src", 100, StickerOptions(), encoder=encoder)

    assert outcome.state is EncodeState.SUCCESS
    assert outcome.content == b"x" * 10
    assert outcome.attempts == (EncodingAttempt(90, 30, 0),)


@pytest.mark.anyio
async def test_degrades_quality_then_frame_rate() -> None:
    encoder = _Encoder(b"x" * 400, b"x" * 300, b"x" * 200, b"x" * 150)

    outcome = await encode_sticker(b"src", 100, StickerOptions(), encoder=encoder)

    assert _tried(encoder) == [(90, 30), (80, 30), (70, 28), (60, 26)]
    assert outcome.state is EncodeState.EXHAUSTED
    assert outcome.content == b"x" * 150
    assert [a.step_index for a in outcome.attempts] == [0, 1, 2, 3]


@pytest.mark.anyio
async def test_stops_as_soon_as_output_fits() -> None:
    encoder = _Encoder(b"x" * 400, b"x" * 100, b"unused")

    outcome = await encode_sticker(b"src", 100, StickerOptions(), encoder=encoder)

    assert outcome.state is EncodeState.SUCCESS
    assert len(outcome.attempts) == 2
    assert encoder.outputs == [b"unused"]


def test_reductions_respect_floors() -> None:
    attempt = EncodingAttempt(quality=55, frame_rate=9, step_index=1)

    reduced = next_attempt(attempt)

    assert reduced == EncodingAttempt(quality=50, frame_rate=8, step_index=2)
    assert next_attempt(reduced) == EncodingAttempt(50, 8, 3)


@pytest.mark.anyio
async def test_encoder_error_consumes_an_attempt() -> None:
    encoder = _Encoder(RuntimeError("ffmpeg died"), b"ok")

    outcome = await encode_sticker(b"src", 100, StickerOptions(), encoder=encoder)

    assert outcome.state is EncodeState.SUCCESS
    assert outcome.content == b"ok"
    assert _tried(encoder) == [(90, 30), (80, 30)]


@pytest.mark.anyio
async def test_no_output_at_all_is_a_failed_outcome() -> None:
    encoder = _Encoder(*(OSError("boom") for _ in range(4)))

    outcome = await encode_sticker(b"src", 100, StickerOptions(), encoder=encoder)

    assert outcome.state is EncodeState.FAILED
    assert outcome.content == b""
    assert len(outcome.attempts) == 4


@pytest.mark.anyio
async def test_encode_under_budget_never_raises_on_encoder_errors() -> None:
    encoder = _Encoder(*(RuntimeError("boom") for _ in range(4)))

    content = await encode_under_budget(b"src", 100, StickerOptions(), encoder=encoder)

    assert content == b""


@pytest.mark.anyio
async def test_attempt_budget_is_configurable() -> None:
    encoder = _Encoder(b"x" * 400, b"x" * 300)

    outcome = await encode_sticker(
        b"src", 100, StickerOptions(), encoder=encoder, max_attempts=2
    )

    assert outcome.state is EncodeState.EXHAUSTED
    assert len(outcome.attempts) == 2


@pytest.mark.anyio
async def test_encode_under_budget_returns_bytes() -> None:
    encoder = _Encoder(b"webp")

    content = await encode_under_budget(
        b"src", 1024, StickerOptions(quality=70, frame_rate=15), encoder=encoder
    )

    assert content == b"webp"
    assert _tried(encoder) == [(70, 15)]
