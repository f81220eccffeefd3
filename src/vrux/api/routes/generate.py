"""Component generation endpoints: single-shot, variant stream and dev mode."""

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import StreamingResponse

from ...core import (
    ApiModel,
    DevGenerateRequest,
    GenerateRequest,
    ProviderUnavailableError,
    StreamRequest,
    ValidationError,
    get_logger,
)
from ...core.id import new_request_id
from ...core.validate import SECURITY_HEADERS
from ...generation import encode_sse
from ...providers import GenerationOptions
from ..deps import ApiLimitedUser, Chain, Generation, Limiter, OptionalUser, rate_limited

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["generate"])

DEV_REMAINING_REQUESTS = 100

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


class GenerateResponse(ApiModel):
    code: str
    provider: str
    usage: dict[str, int]
    remaining_requests: int
    retried: bool = False


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or new_request_id()


@router.post("/generate-ui", response_model=GenerateResponse)
async def generate_ui(
    request: Request,
    response: Response,
    generator: Generation,
    limiter: Limiter,
    identifier: Annotated[str, Depends(rate_limited)],
    body: GenerateRequest,
    user: OptionalUser,
) -> GenerateResponse:
    """Generate one validated component."""
    response.headers.update(SECURITY_HEADERS)

    options = GenerationOptions(
        model=body.model,
        temperature=body.temperature,
        max_tokens=body.max_tokens,
        user_id=user.id if user else None,
        request_id=_request_id(request),
    )
    result = await generator.generate_component(body.prompt, options)
    return GenerateResponse(
        code=result.code,
        provider=result.provider,
        usage=result.usage,
        remaining_requests=limiter.remaining(identifier),
        retried=result.retried,
    )


@router.post("/generate-ui-stream")
async def generate_ui_stream(
    request: Request,
    user: ApiLimitedUser,
    generator: Generation,
    chain: Chain,
    limiter: Limiter,
    identifier: Annotated[str, Depends(rate_limited)],
    body: StreamRequest,
) -> StreamingResponse:
    """
    Stream component variants as server-sent events.

    Fails with 503 before streaming when no provider is healthy.
    """
    request_id = _request_id(request)
    health = await chain.all_health()
    available = [name for name, status in health.items() if status.available]
    if not available:
        logger.error("no_providers_available", request_id=request_id)
        raise ProviderUnavailableError("All AI providers are currently unavailable. Please try again later.")

    logger.info(
        "stream_requested",
        request_id=request_id,
        user_id=user.id,
        variants=body.variants,
        prompt_length=len(body.prompt),
    )

    async def frames() -> AsyncIterator[bytes]:
        async for frame in generator.stream_variants(
            body.prompt,
            body.variants,
            model=body.model,
            temperature=body.temperature,
            style=body.style,
            request_id=request_id,
            user_id=user.id,
            providers=available,
            remaining_requests=lambda: limiter.remaining(identifier),
        ):
            yield encode_sse(frame)

    return StreamingResponse(frames(), media_type="text/event-stream", headers=SSE_HEADERS)


@router.post("/generate-ui-dev", response_model=GenerateResponse)
async def generate_ui_dev(body: DevGenerateRequest, generator: Generation) -> GenerateResponse:
    """Canned component for local development; no provider is called."""
    if not body.prompt:
        raise ValidationError("Prompt is required", code="PROMPT_REQUIRED")

    result = await generator.dev_component(body.prompt)
    return GenerateResponse(
        code=result.code,
        provider=result.provider,
        usage=result.usage,
        remaining_requests=DEV_REMAINING_REQUESTS,
    )
