from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from .classify import Extraction, classify
from .encoding import EncodeOutcome, Encoder, encode_sticker
from .providers import ProviderEndpoint, without_disabled
from .providers import enhance as enhance_providers
from .providers import media as media_providers
from .providers import music as music_providers
from .providers import upload as upload_providers
from .results import EnhanceResult, Failure, MediaResult, TrackResult, UploadResult
from .settings import MediafetchSettings
from .transport import HttpTransport, Transport


class Resolver:
    """Entry point for command handlers.

    Holds the transport and settings so handlers only pass their input. The
    provider lists are filtered once, at construction.
    """

    def __init__(
        self,
        settings: MediafetchSettings | None = None,
        *,
        transport: Transport | None = None,
        uploader: upload_providers.MediaUploader | None = None,
        encoder: Encoder | None = None,
    ) -> None:
        self.settings = settings or MediafetchSettings()
        http = self.settings.http
        self._owned_transport: HttpTransport | None = None
        if transport is None:
            self._owned_transport = HttpTransport(
                timeout_s=http.timeout_s, user_agent=http.user_agent
            )
            transport = self._owned_transport
        self.transport: Transport = transport
        self._disabled = tuple(self.settings.providers.disabled)
        self._upload_providers = self._with_upload_timeout(
            upload_providers.UPLOAD_PROVIDERS
        )
        self.uploader = uploader or upload_providers.FallbackUploader(
            self.transport, providers=self._upload_providers
        )
        self.encoder = encoder

    async def close(self) -> None:
        if self._owned_transport is not None:
            await self._owned_transport.close()

    async def __aenter__(self) -> Resolver:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _enabled(
        self, providers: Sequence[ProviderEndpoint]
    ) -> tuple[ProviderEndpoint, ...]:
        return without_disabled(providers, self._disabled)

    def _with_upload_timeout(
        self, providers: Sequence[ProviderEndpoint]
    ) -> tuple[ProviderEndpoint, ...]:
        timeout_s = self.settings.http.upload_timeout_s
        return tuple(replace(p, timeout_s=timeout_s) for p in self._enabled(providers))

    def classify(self, text: str | None) -> Extraction | None:
        return classify(text)

    async def play(self, query: str) -> TrackResult | Failure:
        return await music_providers.play(
            query,
            transport=self.transport,
            providers=self._enabled(music_providers.PLAY_PROVIDERS),
        )

    async def spotify_search(self, query: str) -> TrackResult | Failure:
        return await music_providers.spotify_search(
            query,
            transport=self.transport,
            providers=self._enabled(music_providers.SPOTIFY_SEARCH_PROVIDERS),
        )

    async def download(
        self, text: str | None, *, prefer_video: bool = False
    ) -> MediaResult | Failure:
        return await media_providers.download(
            text,
            transport=self.transport,
            prefer_video=prefer_video,
            disabled=self._disabled,
        )

    async def upscale(self, content: bytes) -> EnhanceResult | Failure:
        return await enhance_providers.upscale(
            content,
            transport=self.transport,
            uploader=self.uploader,
            providers=self._enabled(enhance_providers.UPSCALE_PROVIDERS),
        )

    async def remove_background(self, content: bytes) -> EnhanceResult | Failure:
        return await enhance_providers.remove_background(
            content,
            transport=self.transport,
            uploader=self.uploader,
            providers=self._enabled(enhance_providers.REMOVE_BG_PROVIDERS),
        )

    async def upload(self, content: bytes) -> UploadResult | Failure:
        return await upload_providers.upload(
            content, transport=self.transport, providers=self._upload_providers
        )

    async def upload_video(self, content: bytes) -> UploadResult | Failure:
        return await upload_providers.upload_video(
            content,
            transport=self.transport,
            providers=self._with_upload_timeout(
                upload_providers.VIDEO_UPLOAD_PROVIDERS
            ),
        )

    async def upload_image(self, content: bytes) -> UploadResult | Failure:
        return await upload_providers.upload_image(
            content,
            transport=self.transport,
            providers=self._with_upload_timeout(
                upload_providers.IMAGE_UPLOAD_PROVIDERS
            ),
        )

    async def sticker(self, content: bytes) -> EncodeOutcome:
        if self.encoder is None:
            raise RuntimeError("no sticker encoder configured")
        sticker = self.settings.sticker
        return await encode_sticker(
            content,
            sticker.max_bytes,
            sticker.options(),
            encoder=self.encoder,
            max_attempts=sticker.max_attempts,
        )
