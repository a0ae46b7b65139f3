from __future__ import annotations

import re
from collections.abc import Sequence

from ..fallback import resolve
from ..normalize import UseCase, shape_matcher
from ..results import EnhancedBuffer, EnhanceResult, Failure
from ..schemas import enhance
from ..transport import Transport
from . import ProviderEndpoint, ProviderRequest
from .upload import MediaUploader

UPLOAD_FAILED = "Upload failed"


def _auto(name: str, template: str) -> ProviderEndpoint:
    return ProviderEndpoint(name, template, response_kind="auto")


UPSCALE_PROVIDERS: tuple[ProviderEndpoint, ...] = (
    _auto("nekolabs-pxpic-upscale", "https://api.nekolabs.web.id/tools/pxpic/upscale?imageUrl={image}"),
    _auto("nekolabs-pxpic-enhance", "https://api.nekolabs.web.id/tools/pxpic/enhance?imageUrl={image}"),
    _auto("nekolabs-ihancer", "https://api.nekolabs.web.id/tools/ihancer?imageUrl={image}"),
    _auto("zenzxz-upscale", "https://api.zenzxz.my.id/api/tools/upscale?url={image}"),
    _auto("zenzxz-upscalev2-x2", "https://api.zenzxz.my.id/api/tools/upscalev2?url={image}&scale=2"),
    _auto("zenzxz-upscalev2-x4", "https://api.zenzxz.my.id/api/tools/upscalev2?url={image}&scale=4"),
    _auto("siputzx-iloveimg", "https://api.siputzx.my.id/api/iloveimg/upscale?image={image}&scale=2"),
    _auto("ootaizumi-upscale", "https://api.ootaizumi.web.id/tools/upscale?imageUrl={image}"),
    _auto("elrayy-remini", "https://api.elrayyxml.web.id/api/tools/remini?url={image}"),
    _auto("elrayy-upscale", "https://api.elrayyxml.web.id/api/tools/upscale?url={image}&resolusi=5"),
)

REMOVE_BG_PROVIDERS: tuple[ProviderEndpoint, ...] = (
    _auto("nekolabs-removebg-v1", "https://api.nekolabs.web.id/tools/remove-bg/v1?imageUrl={image}"),
    _auto("nekolabs-removebg-v2", "https://api.nekolabs.web.id/tools/remove-bg/v2?imageUrl={image}"),
    _auto("nekolabs-removebg-v3", "https://api.nekolabs.web.id/tools/remove-bg/v3?imageUrl={image}"),
    _auto("nekolabs-removebg-v4", "https://api.nekolabs.web.id/tools/remove-bg/v4?imageUrl={image}"),
    _auto("ootaizumi-removebg", "https://api.ootaizumi.web.id/tools/removebg?imageUrl={image}"),
    _auto("elrayy-removebg", "https://api.elrayyxml.web.id/api/tools/removebg?url={image}"),
)


def _buffer(content: bytes) -> EnhancedBuffer:
    return EnhancedBuffer(result_buffer=content)


UPSCALE: UseCase[EnhanceResult] = UseCase(
    name="enhance.upscale",
    matchers=(
        shape_matcher(enhance.ResultUrl),
        shape_matcher(enhance.DataUrl),
        shape_matcher(enhance.ResultImageUrl),
    ),
    failure_message="All methods failed",
    envelope=None,
    media_type=re.compile(r"image"),
    binary_result=_buffer,
)

REMOVE_BG: UseCase[EnhanceResult] = UseCase(
    name="enhance.remove_bg",
    matchers=(shape_matcher(enhance.RemovedBackground),),
    failure_message="All methods failed",
    envelope=enhance.strict_ok,
    media_type=re.compile(r"image/(png|jpe?g|webp)"),
    binary_result=_buffer,
)


async def _run(
    content: bytes,
    use_case: UseCase[EnhanceResult],
    providers: Sequence[ProviderEndpoint],
    *,
    transport: Transport,
    uploader: MediaUploader,
) -> EnhanceResult | Failure:
    if not content:
        return Failure(error=UPLOAD_FAILED)
    image_url = await uploader(content)
    if not image_url:
        return Failure(error=UPLOAD_FAILED)
    request = ProviderRequest(params={"image": image_url})
    return await resolve(providers, request, use_case, transport=transport)


async def upscale(
    content: bytes,
    *,
    transport: Transport,
    uploader: MediaUploader,
    providers: Sequence[ProviderEndpoint] = UPSCALE_PROVIDERS,
) -> EnhanceResult | Failure:
    return await _run(
        content, UPSCALE, providers, transport=transport, uploader=uploader
    )


async def remove_background(
    content: bytes,
    *,
    transport: Transport,
    uploader: MediaUploader,
    providers: Sequence[ProviderEndpoint] = REMOVE_BG_PROVIDERS,
) -> EnhanceResult | Failure:
    return await _run(
        content, REMOVE_BG, providers, transport=transport, uploader=uploader
    )
