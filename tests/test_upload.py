from __future__ import annotations

import pytest

from mediafetch.providers import upload as upload_module
from mediafetch.providers.upload import (
    UNKNOWN_TYPE,
    UPLOAD_PROVIDERS,
    FallbackUploader,
    sniff_payload,
    upload,
    upload_image,
    upload_video,
)
from mediafetch.results import Failure, UploadResult
from tests.fakes import (
    JPEG_BYTES,
    MP4_BYTES,
    PNG_BYTES,
    FakeTransport,
    json_response,
    text_response,
)


@pytest.mark.anyio
async def test_catbox_plain_text_reply() -> None:
    transport = FakeTransport(
        {"catbox.moe": text_response("https://files.catbox.moe/abc.jpg\n")}
    )

    result = await upload(JPEG_BYTES, transport=transport)

    assert result == UploadResult(url="https://files.catbox.moe/abc.jpg")
    call = transport.calls[0]
    assert call.method == "POST"
    assert call.kwargs["data"] == {"reqtype": "fileupload"}
    assert call.kwargs["files"] == {
        "fileToUpload": ("file.jpg", JPEG_BYTES, "image/jpeg")
    }
    assert call.kwargs["timeout_s"] == 60.0


@pytest.mark.anyio
async def test_falls_back_to_uguu_when_catbox_returns_garbage() -> None:
    transport = FakeTransport(
        {
            "catbox.moe": text_response("Internal error"),
            "uguu.se": json_response(
                {"success": True, "files": [{"url": "https://h.uguu.se/x.jpg"}]}
            ),
        }
    )

    result = await upload(JPEG_BYTES, transport=transport)

    assert result == UploadResult(url="https://h.uguu.se/x.jpg")
    assert transport.calls[1].kwargs["data"] is None
    assert "files[]" in transport.calls[1].kwargs["files"]


@pytest.mark.anyio
async def test_put_icu_sends_raw_body() -> None:
    transport = FakeTransport(
        {"put.icu": json_response({"direct_url": "https://put.icu/x.png"})}
    )

    result = await upload(PNG_BYTES, transport=transport)

    assert result == UploadResult(url="https://put.icu/x.png")
    call = transport.calls[-1]
    assert call.method == "PUT"
    assert call.kwargs["content"] == PNG_BYTES
    assert call.kwargs["files"] is None
    assert call.kwargs["headers"] == {
        "Content-Type": "image/png",
        "Accept": "application/json",
    }


@pytest.mark.anyio
async def test_tmpfiles_page_link_becomes_direct_link() -> None:
    transport = FakeTransport(
        {
            "tmpfiles.org": json_response(
                {"status": "success", "data": {"url": "https://tmpfiles.org/123/a.jpg"}}
            )
        }
    )

    result = await upload(JPEG_BYTES, transport=transport)

    assert result == UploadResult(url="https://tmpfiles.org/dl/123/a.jpg")
    assert len(transport.calls) == len(UPLOAD_PROVIDERS)


@pytest.mark.anyio
async def test_empty_buffer_makes_no_requests() -> None:
    transport = FakeTransport()

    result = await upload(b"", transport=transport)

    assert result == Failure(error="Empty buffer.")
    assert transport.calls == []


@pytest.mark.anyio
async def test_unknown_type_makes_no_requests(monkeypatch) -> None:
    monkeypatch.setattr(
        upload_module.magic,
        "from_buffer",
        lambda content, mime=False: "application/octet-stream",
    )
    transport = FakeTransport()

    result = await upload(b"\x00\x01\x02", transport=transport)

    assert result == Failure(error=UNKNOWN_TYPE)
    assert transport.calls == []


@pytest.mark.anyio
async def test_all_hosts_failing() -> None:
    transport = FakeTransport()

    result = await upload(PNG_BYTES, transport=transport)

    assert result == Failure(error="All uploaders failed.")


@pytest.mark.anyio
async def test_fallback_uploader_sends_sniffed_type() -> None:
    transport = FakeTransport(
        {"catbox.moe": text_response("https://files.catbox.moe/z.png")}
    )
    ok = FallbackUploader(transport)
    broken = FallbackUploader(FakeTransport())

    assert await ok(PNG_BYTES) == "https://files.catbox.moe/z.png"
    assert transport.calls[0].kwargs["files"]["fileToUpload"] == (
        "file.png",
        PNG_BYTES,
        "image/png",
    )
    assert await broken(PNG_BYTES) is None


def test_sniff_payload_names_file_by_content() -> None:
    payload = sniff_payload(PNG_BYTES)

    assert payload is not None
    assert payload.mime_type == "image/png"
    assert payload.filename == "file.png"


@pytest.mark.anyio
async def test_video_host_requires_video() -> None:
    transport = FakeTransport(
        {
            "api/tools/videy": json_response(
                {"success": True, "data": {"result": {"link": " https://videy.co/v?id=1 "}}}
            )
        }
    )

    rejected = await upload_video(PNG_BYTES, transport=transport)
    assert rejected == Failure(error="Need video.")
    assert transport.calls == []

    result = await upload_video(MP4_BYTES, transport=transport)
    assert result == UploadResult(url="https://videy.co/v?id=1")
    call = transport.calls[0]
    assert call.kwargs["data"] == {"apikey": "freeApikey"}
    assert call.kwargs["files"]["file"][2] == "video/mp4"


@pytest.mark.anyio
async def test_image_host_requires_image_and_success_flag() -> None:
    transport = FakeTransport(
        {
            "api/tools/goFile": json_response(
                {"data": {"result": {"imageUrl": "https://gofile.io/x.png"}}}
            )
        }
    )

    assert await upload_image(MP4_BYTES, transport=transport) == Failure(
        error="Need image."
    )
    assert await upload_image(PNG_BYTES, transport=transport) == Failure(
        error="Image upload failed."
    )

    transport.routes["api/tools/goFile"] = json_response(
        {"success": True, "data": {"result": {"imageUrl": "https://gofile.io/x.png"}}}
    )
    assert await upload_image(PNG_BYTES, transport=transport) == UploadResult(
        url="https://gofile.io/x.png"
    )
