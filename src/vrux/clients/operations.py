"""
Operations Feed Client
Dashboard state fed by the operations WebSocket, with fixed-delay reconnects.
"""

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import websockets
from pydantic import ValidationError as PydanticValidationError

from ..core import JSONParseError, get_logger, loads_object
from ..operations import MetricHistory, ServiceHealth, SystemMetrics
from ..operations.metrics import DEFAULT_WINDOW

logger = get_logger(__name__)

MAX_ALERTS = 10
MAX_TRACES = 20
RECONNECT_DELAY = 5.0


class DashboardState:
    """Client-side view of the operations dashboard."""

    def __init__(self, window: int = DEFAULT_WINDOW) -> None:
        self.metrics: SystemMetrics | None = None
        self.history = MetricHistory(window)
        self.services: list[ServiceHealth] = []
        self.alerts: list[dict[str, Any]] = []
        self.traces: list[dict[str, Any]] = []

    def apply(self, message: Mapping[str, Any]) -> bool:
        """
        Apply one feed message.

        Returns:
            False when the message type is unknown or its payload is malformed
        """
        kind = message.get("type")
        try:
            if kind == "metrics":
                self.metrics = SystemMetrics.model_validate(message["metrics"])
                self.history.update(self.metrics)
            elif kind == "services":
                self.services = [ServiceHealth.model_validate(s) for s in message["services"]]
            elif kind == "alert":
                self.alerts = [dict(message["alert"]), *self.alerts][:MAX_ALERTS]
            elif kind == "alerts":
                self.alerts = [dict(a) for a in message["alerts"]]
            elif kind == "trace":
                self.traces = [dict(message["trace"]), *self.traces][:MAX_TRACES]
            else:
                return False
        except (KeyError, TypeError, ValueError, PydanticValidationError) as e:
            logger.debug("dashboard_message_ignored", type=kind, error=str(e))
            return False
        return True

    def acknowledge(self, alert_id: str) -> None:
        for alert in self.alerts:
            if alert.get("id") == alert_id:
                alert["acknowledged"] = True


class OperationsFeed:
    """
    Keeps a :class:`DashboardState` in sync with ``/api/ws/operations``.

    After the socket closes or fails to connect, waits exactly
    ``reconnect_delay`` seconds and connects again, for as long as the feed
    runs. ``stop`` ends the loop.
    """

    def __init__(
        self,
        url: str,
        state: DashboardState | None = None,
        reconnect_delay: float = RECONNECT_DELAY,
        connect: Callable[[str], Any] = websockets.connect,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.url = url
        self.state = state or DashboardState()
        self.reconnect_delay = reconnect_delay
        self._connect = connect
        self._sleep = sleep
        self._running = False
        self._socket: Any = None
        self.connected = False
        self.attempts = 0

    def handle(self, raw: str | bytes) -> None:
        try:
            message = loads_object(raw)
        except JSONParseError:
            logger.debug("operations_feed_bad_message")
            return
        self.state.apply(message)

    async def run(self) -> None:
        self._running = True
        while self._running:
            self.attempts += 1
            try:
                async with self._connect(self.url) as socket:
                    self._socket = socket
                    self.connected = True
                    logger.info("operations_feed_connected", url=self.url)
                    async for raw in socket:
                        self.handle(raw)
            except (websockets.ConnectionClosed, websockets.InvalidHandshake, OSError) as e:
                logger.warning("operations_feed_error", url=self.url, error=str(e))
            finally:
                self._socket = None
                self.connected = False

            if not self._running:
                break
            logger.info("operations_feed_reconnecting", delay=self.reconnect_delay)
            await self._sleep(self.reconnect_delay)

    async def send_ping(self) -> None:
        if self._socket is not None:
            await self._socket.send('{"type":"ping"}')

    async def stop(self) -> None:
        self._running = False
        if self._socket is not None:
            await self._socket.close()
