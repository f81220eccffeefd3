"""Operations dashboard endpoints and the live WebSocket feed."""

from fastapi import APIRouter, WebSocket

from ...core import ApiModel
from ...operations import Alert, ServiceHealth, SystemMetrics
from ..deps import Alerts, ApiLimitedUser, Chain, Feed, Monitor, Sampler

router = APIRouter(tags=["operations"])


class Acknowledged(ApiModel):
    success: bool = True
    message: str = "Alert acknowledged"


@router.get("/api/operations/metrics", response_model=SystemMetrics)
async def system_metrics(user: ApiLimitedUser, sampler: Sampler) -> SystemMetrics:
    return sampler.sample()


@router.get("/api/operations/services", response_model=list[ServiceHealth])
async def services(user: ApiLimitedUser, chain: Chain, monitor: Monitor) -> list[ServiceHealth]:
    return monitor.check(await chain.all_health())


@router.get("/api/operations/alerts", response_model=list[Alert])
async def alerts(user: ApiLimitedUser, engine: Alerts) -> list[Alert]:
    return engine.active_alerts()


@router.post("/api/operations/alerts/{alert_id}/acknowledge", response_model=Acknowledged)
async def acknowledge_alert(alert_id: str, user: ApiLimitedUser, engine: Alerts) -> Acknowledged:
    engine.acknowledge(alert_id)
    return Acknowledged()


@router.websocket("/api/ws/operations")
async def operations_feed(websocket: WebSocket, feed: Feed) -> None:
    await feed.serve(websocket)
