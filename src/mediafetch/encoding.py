"""Sticker encoding under a byte budget.

The encoder itself is external. This module only drives it: each attempt
that comes out too large (or fails) lowers quality, and later attempts also
lower the frame rate, until the output fits or the attempt budget runs out.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Protocol

from .constants import STICKER_MAX_ATTEMPTS
from .logging import get_logger

logger = get_logger(__name__)

QUALITY_STEP = 10
QUALITY_FLOOR = 50
FRAME_RATE_STEP = 2
FRAME_RATE_FLOOR = 8
# Frame rate only starts dropping from this reduction onward.
FRAME_RATE_FROM_STEP = 2


class EncodeState(StrEnum):
    ATTEMPTING = "attempting"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class StickerOptions:
    quality: int = 90
    frame_rate: int = 30
    max_duration_s: int = 10
    pack_name: str = ""
    author_name: str = ""
    emojis: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class EncodingAttempt:
    quality: int
    frame_rate: int
    step_index: int


@dataclass(frozen=True, slots=True)
class EncodeOutcome:
    content: bytes
    state: EncodeState
    attempts: tuple[EncodingAttempt, ...] = field(default_factory=tuple)


class Encoder(Protocol):
    async def __call__(self, content: bytes, options: StickerOptions) -> bytes: ...


def next_attempt(attempt: EncodingAttempt) -> EncodingAttempt:
    step = attempt.step_index + 1
    quality = max(QUALITY_FLOOR, attempt.quality - QUALITY_STEP)
    frame_rate = attempt.frame_rate
    if step >= FRAME_RATE_FROM_STEP:
        frame_rate = max(FRAME_RATE_FLOOR, frame_rate - FRAME_RATE_STEP)
    return EncodingAttempt(quality=quality, frame_rate=frame_rate, step_index=step)


async def encode_sticker(
    content: bytes,
    max_bytes: int,
    options: StickerOptions,
    *,
    encoder: Encoder,
    max_attempts: int = STICKER_MAX_ATTEMPTS,
) -> EncodeOutcome:
    attempt = EncodingAttempt(
        quality=options.quality, frame_rate=options.frame_rate, step_index=0
    )
    tried: list[EncodingAttempt] = []
    last: bytes | None = None

    while True:
        tried.append(attempt)
        attempt_options = replace(
            options, quality=attempt.quality, frame_rate=attempt.frame_rate
        )
        try:
            encoded = await encoder(content, attempt_options)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "sticker.encode_error",
                step=attempt.step_index,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
        else:
            last = encoded
            logger.debug(
                "sticker.attempt",
                step=attempt.step_index,
                quality=attempt.quality,
                frame_rate=attempt.frame_rate,
                size=len(encoded),
                max_bytes=max_bytes,
            )
            if len(encoded) <= max_bytes:
                return EncodeOutcome(encoded, EncodeState.SUCCESS, tuple(tried))

        if len(tried) >= max_attempts:
            break
        attempt = next_attempt(attempt)

    if last is None:
        logger.warning("sticker.no_output", attempts=len(tried))
        return EncodeOutcome(b"", EncodeState.FAILED, tuple(tried))
    logger.info(
        "sticker.over_budget",
        size=len(last),
        max_bytes=max_bytes,
        attempts=len(tried),
    )
    return EncodeOutcome(last, EncodeState.EXHAUSTED, tuple(tried))


async def encode_under_budget(
    content: bytes,
    max_bytes: int,
    options: StickerOptions,
    *,
    encoder: Encoder,
    max_attempts: int = STICKER_MAX_ATTEMPTS,
) -> bytes:
    outcome = await encode_sticker(
        content, max_bytes, options, encoder=encoder, max_attempts=max_attempts
    )
    return outcome.content
