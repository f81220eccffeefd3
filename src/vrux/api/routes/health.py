"""Liveness and Prometheus endpoints."""

from datetime import datetime

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST

from ... import __version__
from ...core import ApiModel
from ...monitoring import metrics_collector
from ...providers import RemoteProvider, now_utc
from ..deps import Chain, SettingsDep

router = APIRouter(tags=["health"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


class HealthResponse(ApiModel):
    status: str
    timestamp: datetime
    version: str
    environment: str
    providers: dict[str, bool]
    uptime: int


@router.get("/api/health", response_model=HealthResponse)
async def health(response: Response, settings: SettingsDep, chain: Chain) -> HealthResponse:
    """Service status and which providers have credentials configured."""
    response.headers.update(NO_CACHE_HEADERS)
    return HealthResponse(
        status="healthy",
        timestamp=now_utc(),
        version=__version__,
        environment=settings.environment,
        providers={
            p.name: p.configured if isinstance(p, RemoteProvider) else True for p in chain.providers
        },
        uptime=int(metrics_collector.uptime_seconds),
    )


@router.get("/metrics")
async def prometheus_metrics() -> Response:
    return Response(content=metrics_collector.get_metrics(), media_type=CONTENT_TYPE_LATEST)
