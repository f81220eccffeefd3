"""
VRUX Service - Main Entry Point
Component generation, templates, sharing and operations telemetry over HTTP.
"""

import asyncio
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import register_error_handlers, routers
from .core import LogContext, Settings, configure_logging, create_container, get_logger, get_settings
from .core.id import new_request_id
from .core.tracing import Tracer
from .monitoring import RequestStats, metrics_collector
from .operations import AlertingEngine
from .providers import ProviderChain

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the container on startup, stop background work on shutdown."""
    settings: Settings = app.state.settings
    logger.info("service_starting", version=__version__, environment=settings.environment)

    container = create_container(settings)
    app.state.container = container
    container.get(Tracer)
    chain = container.get(ProviderChain)
    engine = container.get(AlertingEngine)

    available = await chain.available_providers()
    logger.info("providers_ready", providers=[p.name for p in chain.providers], available=available)

    alert_task: asyncio.Task | None = None
    if settings.enable_alerting:
        alert_task = asyncio.create_task(engine.run(settings.alert_interval))

    try:
        yield
    finally:
        logger.info("service_stopping")
        if alert_task is not None:
            alert_task.cancel()
            await asyncio.gather(alert_task, return_exceptions=True)
        await engine.close()
        chain.close()
        logger.info("service_stopped")


def _observe(request: Request, status_code: int, duration: float) -> None:
    route = request.scope.get("route")
    path = getattr(route, "path", "unmatched")
    metrics_collector.record_http_request(request.method, path, status_code, duration)

    container = getattr(request.app.state, "container", None)
    if container is not None:
        container.get(RequestStats).record(duration * 1000, status_code)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.json_logs)

    app = FastAPI(
        title="VRUX Service",
        description="AI React/Tailwind component generation",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def observe_requests(request: Request, call_next):
        request_id = request.headers.get("x-request-id") or new_request_id()
        request.state.request_id = request_id
        start = time.perf_counter()

        with LogContext(request_id=request_id):
            try:
                response = await call_next(request)
            except Exception:
                logger.exception("request_failed", method=request.method, path=request.url.path)
                _observe(request, 500, time.perf_counter() - start)
                raise

        _observe(request, response.status_code, time.perf_counter() - start)
        response.headers["X-Request-ID"] = request_id
        return response

    register_error_handlers(app)
    for router in routers:
        app.include_router(router)

    return app


def run() -> None:
    """Console entry point."""
    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
