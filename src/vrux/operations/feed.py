"""
Operations Feed
Pushes metrics, service health, alerts and traces to dashboard WebSockets.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from ..core import JSONParseError, get_logger, loads_object, safe_json_dumps
from ..core.tracing import Span, Tracer
from ..monitoring import metrics_collector
from ..providers import now_utc
from .alerts import Alert, AlertingEngine
from .metrics import SystemSampler
from .services import ServiceHealth

logger = get_logger(__name__)

Frame = dict[str, Any]

MAX_INITIAL_TRACES = 20


class DashboardFeed:
    """
    One instance per app; ``serve`` handles one connection.

    Every frame for a connection goes through a single queue drained by one
    sender task, so periodic pushes, alerts and traces never interleave
    writes on the socket.
    """

    def __init__(
        self,
        sampler: SystemSampler,
        services: Callable[[], Awaitable[list[ServiceHealth]]],
        engine: AlertingEngine,
        tracer: Tracer | None = None,
        metrics_interval: float = 2.0,
        services_interval: float = 10.0,
    ) -> None:
        self.sampler = sampler
        self.services = services
        self.engine = engine
        self.tracer = tracer
        self.metrics_interval = metrics_interval
        self.services_interval = services_interval
        self.connections = 0

    def metrics_frame(self, sampler: SystemSampler | None = None) -> Frame:
        snapshot = (sampler or self.sampler).sample()
        return {"type": "metrics", "metrics": snapshot.model_dump(mode="json", by_alias=True)}

    async def services_frame(self) -> Frame:
        services = await self.services()
        return {"type": "services", "services": [s.model_dump(mode="json", by_alias=True) for s in services]}

    def alerts_frame(self) -> Frame:
        alerts = self.engine.active_alerts()
        return {"type": "alerts", "alerts": [a.model_dump(mode="json", by_alias=True) for a in alerts]}

    async def serve(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.connections += 1
        metrics_collector.set_ws_connections(self.connections)
        logger.info("operations_ws_connected", connections=self.connections)

        queue: asyncio.Queue[Frame] = asyncio.Queue()
        # Network deltas are tracked per connection
        sampler = self.sampler.fork()

        async def push_metrics(frames: asyncio.Queue[Frame]) -> None:
            frames.put_nowait(self.metrics_frame(sampler))

        def on_alert(alert: Alert) -> None:
            queue.put_nowait({"type": "alert", "alert": alert.model_dump(mode="json", by_alias=True)})

        def on_span(span: Span) -> None:
            queue.put_nowait({"type": "trace", "trace": span.to_dict()})

        self.engine.subscribe(on_alert)
        if self.tracer is not None:
            self.tracer.subscribe(on_span)

        tasks: list[asyncio.Task] = []
        try:
            queue.put_nowait(self.metrics_frame(sampler))
            queue.put_nowait(await self.services_frame())
            queue.put_nowait(self.alerts_frame())
            if self.tracer is not None:
                for span in reversed(self.tracer.recent(MAX_INITIAL_TRACES)):
                    on_span(span)

            tasks = [
                asyncio.create_task(self._send_loop(websocket, queue)),
                asyncio.create_task(self._every(self.metrics_interval, push_metrics, queue)),
                asyncio.create_task(self._every(self.services_interval, self._push_services, queue)),
            ]
            await self._receive_loop(websocket, queue)
        except WebSocketDisconnect:
            pass
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            self.engine.unsubscribe(on_alert)
            if self.tracer is not None:
                self.tracer.unsubscribe(on_span)
            self.connections -= 1
            metrics_collector.set_ws_connections(self.connections)
            logger.info("operations_ws_closed", connections=self.connections)

    async def _push_services(self, queue: asyncio.Queue[Frame]) -> None:
        queue.put_nowait(await self.services_frame())

    async def _every(
        self,
        interval: float,
        push: Callable[[asyncio.Queue[Frame]], Awaitable[None]],
        queue: asyncio.Queue[Frame],
    ) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                await push(queue)
            except Exception as e:
                logger.error("operations_push_failed", push=push.__name__, error=str(e))

    async def _send_loop(self, websocket: WebSocket, queue: asyncio.Queue[Frame]) -> None:
        while True:
            frame = await queue.get()
            try:
                await websocket.send_text(safe_json_dumps(frame))
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.debug("operations_ws_send_stopped", error=str(e))
                return

    async def _receive_loop(self, websocket: WebSocket, queue: asyncio.Queue[Frame]) -> None:
        while True:
            text = await websocket.receive_text()
            try:
                message = loads_object(text)
            except JSONParseError:
                logger.debug("operations_ws_bad_message", message=text[:80])
                continue
            if message.get("type") == "ping":
                queue.put_nowait({"type": "pong", "timestamp": now_utc().isoformat()})
