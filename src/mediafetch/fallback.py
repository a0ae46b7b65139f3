from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .logging import get_logger
from .normalize import UseCase, normalize, parse_response
from .providers import ProviderEndpoint, ProviderRequest
from .results import Failure
from .transport import HttpResponse, Transport

logger = get_logger(__name__)


def _request_body(
    endpoint: ProviderEndpoint, request: ProviderRequest
) -> dict[str, Any]:
    payload = request.payload
    if payload is None:
        return {}
    if endpoint.raw_body:
        return {
            "content": payload.content,
            "headers": {
                "Content-Type": payload.mime_type,
                "Accept": "application/json",
            },
        }
    if endpoint.upload_field is None:
        return {}
    return {
        "data": dict(endpoint.form) or None,
        "files": {
            endpoint.upload_field: (
                payload.filename,
                payload.content,
                payload.mime_type,
            )
        },
    }


async def _call(
    endpoint: ProviderEndpoint,
    request: ProviderRequest,
    transport: Transport,
) -> HttpResponse | None:
    return await transport.request(
        endpoint.method,
        endpoint.render_url(request.params),
        timeout_s=endpoint.timeout_s,
        **_request_body(endpoint, request),
    )


async def resolve[T](
    providers: Sequence[ProviderEndpoint],
    request: ProviderRequest,
    use_case: UseCase[T],
    *,
    transport: Transport,
) -> T | Failure:
    """Try ``providers`` in order and return the first recognized result.

    One pass, no retries: a provider that fails at any stage is abandoned for
    this call and the next one is tried.
    """
    for index, endpoint in enumerate(providers):
        response = await _call(endpoint, request, transport)
        if response is None:
            _skip(use_case, endpoint, index, "transport_error")
            continue
        if not response.ok:
            _skip(use_case, endpoint, index, "http_status", status=response.status)
            continue
        parsed = parse_response(endpoint.response_kind, response)
        if parsed is None:
            _skip(
                use_case,
                endpoint,
                index,
                "parse_error",
                content_type=response.content_type,
            )
            continue
        result = normalize(parsed, use_case)
        if isinstance(result, Failure):
            _skip(use_case, endpoint, index, "no_match", detail=result.error)
            continue
        logger.info(
            "provider.success",
            use_case=use_case.name,
            provider=endpoint.name,
            index=index,
        )
        return result

    logger.warning(
        "provider.exhausted", use_case=use_case.name, tried=len(providers)
    )
    return Failure(error=use_case.failure_message)


def _skip(
    use_case: UseCase[Any],
    endpoint: ProviderEndpoint,
    index: int,
    reason: str,
    **fields: Any,
) -> None:
    logger.debug(
        "provider.skip",
        use_case=use_case.name,
        provider=endpoint.name,
        index=index,
        reason=reason,
        **fields,
    )
