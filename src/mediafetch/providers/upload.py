from __future__ import annotations

import mimetypes
from collections.abc import Sequence
from typing import Protocol

import magic

from ..fallback import resolve
from ..logging import get_logger
from ..normalize import UseCase, shape_matcher
from ..results import Failure, UploadResult
from ..schemas import enhance
from ..transport import Transport
from . import Payload, ProviderEndpoint, ProviderRequest

logger = get_logger(__name__)

UPLOAD_TIMEOUT_S = 60.0

UPLOAD_PROVIDERS: tuple[ProviderEndpoint, ...] = (
    ProviderEndpoint(
        "catbox",
        "https://catbox.moe/user/api.php",
        response_kind="text",
        method="POST",
        upload_field="fileToUpload",
        form=(("reqtype", "fileupload"),),
        timeout_s=UPLOAD_TIMEOUT_S,
    ),
    ProviderEndpoint(
        "uguu",
        "https://uguu.se/upload.php",
        method="POST",
        upload_field="files[]",
        timeout_s=UPLOAD_TIMEOUT_S,
    ),
    ProviderEndpoint(
        "quax",
        "https://qu.ax/upload.php",
        method="POST",
        upload_field="files[]",
        timeout_s=UPLOAD_TIMEOUT_S,
    ),
    ProviderEndpoint(
        "puticu",
        "https://put.icu/upload/",
        method="PUT",
        raw_body=True,
        timeout_s=UPLOAD_TIMEOUT_S,
    ),
    ProviderEndpoint(
        "tmpfiles",
        "https://tmpfiles.org/api/v1/upload",
        method="POST",
        upload_field="file",
        timeout_s=UPLOAD_TIMEOUT_S,
    ),
)

VIDEO_UPLOAD_PROVIDERS: tuple[ProviderEndpoint, ...] = (
    ProviderEndpoint(
        "anabot-videy",
        "https://anabot.my.id/api/tools/videy",
        method="POST",
        upload_field="file",
        form=(("apikey", "freeApikey"),),
        timeout_s=UPLOAD_TIMEOUT_S,
    ),
)

IMAGE_UPLOAD_PROVIDERS: tuple[ProviderEndpoint, ...] = (
    ProviderEndpoint(
        "anabot-gofile",
        "https://anabot.my.id/api/tools/goFile",
        method="POST",
        upload_field="file",
        form=(("apikey", "freeApikey"),),
        timeout_s=UPLOAD_TIMEOUT_S,
    ),
)

EMPTY_BUFFER = "Empty buffer."
UNKNOWN_TYPE = "Unknown file type."

UPLOAD: UseCase[UploadResult] = UseCase(
    name="upload",
    matchers=(
        enhance.plain_text_url,
        shape_matcher(enhance.UploadedFiles),
        shape_matcher(enhance.DirectUrl),
        shape_matcher(enhance.TmpfilesUpload),
    ),
    failure_message="All uploaders failed.",
)

VIDEO_UPLOAD: UseCase[UploadResult] = UseCase(
    name="upload.video",
    matchers=(shape_matcher(enhance.VideyUpload),),
    failure_message="Video upload failed.",
    envelope=enhance.strict_ok,
)

IMAGE_UPLOAD: UseCase[UploadResult] = UseCase(
    name="upload.image",
    matchers=(shape_matcher(enhance.GoFileUpload),),
    failure_message="Image upload failed.",
    envelope=enhance.strict_ok,
)

# libmagic answers these when it cannot name the content.
_UNKNOWN_MIME_TYPES = frozenset({"application/octet-stream", "inode/x-empty"})


class MediaUploader(Protocol):
    async def __call__(self, content: bytes) -> str | None: ...


def sniff_payload(content: bytes) -> Payload | None:
    """Name the buffer after its sniffed type, or ``None`` when unknown."""
    mime_type = magic.from_buffer(content, mime=True)
    if not mime_type or mime_type in _UNKNOWN_MIME_TYPES:
        return None
    extension = mimetypes.guess_extension(mime_type)
    if extension is None:
        return None
    return Payload(content=content, filename=f"file{extension}", mime_type=mime_type)


async def _upload(
    content: bytes,
    use_case: UseCase[UploadResult],
    providers: Sequence[ProviderEndpoint],
    *,
    transport: Transport,
    required_prefix: str = "",
) -> UploadResult | Failure:
    if not content:
        return Failure(error=EMPTY_BUFFER)
    payload = sniff_payload(content)
    if payload is None:
        logger.warning("upload.unknown_type", use_case=use_case.name, size=len(content))
        return Failure(error=UNKNOWN_TYPE)
    if not payload.mime_type.startswith(required_prefix):
        return Failure(error=f"Need {required_prefix.rstrip('/')}.")
    request = ProviderRequest(payload=payload)
    return await resolve(providers, request, use_case, transport=transport)


async def upload(
    content: bytes,
    *,
    transport: Transport,
    providers: Sequence[ProviderEndpoint] = UPLOAD_PROVIDERS,
) -> UploadResult | Failure:
    return await _upload(content, UPLOAD, providers, transport=transport)


async def upload_video(
    content: bytes,
    *,
    transport: Transport,
    providers: Sequence[ProviderEndpoint] = VIDEO_UPLOAD_PROVIDERS,
) -> UploadResult | Failure:
    return await _upload(
        content, VIDEO_UPLOAD, providers, transport=transport, required_prefix="video/"
    )


async def upload_image(
    content: bytes,
    *,
    transport: Transport,
    providers: Sequence[ProviderEndpoint] = IMAGE_UPLOAD_PROVIDERS,
) -> UploadResult | Failure:
    return await _upload(
        content, IMAGE_UPLOAD, providers, transport=transport, required_prefix="image/"
    )


class FallbackUploader:
    """``MediaUploader`` backed by the public upload hosts."""

    def __init__(
        self,
        transport: Transport,
        *,
        providers: Sequence[ProviderEndpoint] = UPLOAD_PROVIDERS,
    ) -> None:
        self._transport = transport
        self._providers = tuple(providers)

    async def __call__(self, content: bytes) -> str | None:
        result = await upload(
            content, transport=self._transport, providers=self._providers
        )
        if isinstance(result, Failure):
            logger.warning("upload.failed", error=result.error)
            return None
        return result.url
