"""Tests for the Python API client, like toggle and operations feed client."""

import httpx
import pytest
import respx

from vrux.clients import ClientError, DashboardState, LikeToggle, OperationsFeed, VruxClient
from vrux.core import safe_json_dumps
from vrux.operations import SystemSampler

BASE_URL = "http://vrux.test"


@pytest.fixture
async def api(client):
    """Client talking to the app in-process; the TestClient keeps the lifespan running."""
    async with VruxClient("http://testserver", transport=httpx.ASGITransport(app=client.app)) as api_client:
        yield api_client


def metrics_message() -> dict:
    return {"type": "metrics", "metrics": SystemSampler().sample().model_dump(mode="json", by_alias=True)}


# ============================================================================
# VruxClient
# ============================================================================

@pytest.mark.integration
async def test_client_sign_in_keeps_session(api):
    user = await api.sign_in("demo@vrux.dev", "demo123")
    me = await api.me()

    assert me["id"] == user["id"]
    await api.sign_out()
    with pytest.raises(ClientError) as exc_info:
        await api.me()
    assert exc_info.value.status == 401


@pytest.mark.integration
async def test_client_generate(api):
    result = await api.generate("Create a button with a click counter")

    assert result["provider"] == "Mock"
    assert "<button" in result["code"]


@pytest.mark.integration
async def test_client_generate_variants(api):
    await api.sign_in("demo@vrux.dev", "demo123")

    result = await api.generate_variants("a pricing card", variants=2, style="elegant")

    assert [v.style for v in result.completed()] == ["elegant", "elegant"]
    assert result.done["remainingRequests"] >= 0


@pytest.mark.integration
async def test_client_stream_error_before_streaming(api):
    with pytest.raises(ClientError) as exc_info:
        async for _ in api.generate_stream("a card"):
            pass

    assert exc_info.value.status == 401
    assert exc_info.value.payload["code"] == "AUTH_REQUIRED"


@pytest.mark.integration
async def test_client_templates_and_shares(api):
    await api.sign_in("demo@vrux.dev", "demo123")

    templates = await api.templates(category="ecommerce")
    assert templates["total"] == 1
    assert (await api.use_template("ecommerce-product-1"))["uses"] == 204

    created = await api.share("() => <div/>", "Hero", tags=["hero"])
    share = await api.get_share(created["share"]["id"])
    assert share["title"] == "Hero"
    assert (await api.like_share(share["id"]))["liked"] is True


@pytest.mark.unit
@respx.mock
async def test_client_error_mapping():
    respx.post(f"{BASE_URL}/api/generate-ui").mock(
        return_value=httpx.Response(429, json={"error": "Too many", "message": "Slow down", "code": "RATE_LIMITED"})
    )
    respx.get(f"{BASE_URL}/api/auth/me").mock(side_effect=httpx.ConnectError("refused"))

    async with VruxClient(BASE_URL) as api_client:
        with pytest.raises(ClientError) as limited:
            await api_client.generate("a toggle switch")
        with pytest.raises(ClientError) as offline:
            await api_client.me()

    assert limited.value.status == 429
    assert limited.value.message == "Slow down"
    assert offline.value.status == 0


# ============================================================================
# LikeToggle
# ============================================================================

@pytest.mark.unit
async def test_like_toggle_adopts_server_counts():
    toggle = LikeToggle(liked=False, likes=4)
    seen = []

    async def request(liked):
        seen.append((liked, toggle.liked, toggle.likes))
        return {"liked": True, "likes": 10}

    await toggle.toggle(request)

    # Optimistic state was visible while the request was in flight
    assert seen == [(True, True, 5)]
    assert (toggle.liked, toggle.likes) == (True, 10)


@pytest.mark.unit
async def test_like_toggle_reverts_on_failure():
    toggle = LikeToggle(liked=True, likes=1)

    async def request(liked):
        raise ClientError(500, "boom")

    with pytest.raises(ClientError):
        await toggle.toggle(request)

    assert (toggle.liked, toggle.likes) == (True, 1)


@pytest.mark.unit
async def test_like_toggle_never_goes_negative():
    toggle = LikeToggle(liked=True, likes=0)

    async def request(liked):
        return None

    await toggle.toggle(request)

    assert (toggle.liked, toggle.likes) == (False, 0)


# ============================================================================
# DashboardState
# ============================================================================

@pytest.mark.unit
def test_dashboard_state_metrics_update_history():
    state = DashboardState(window=4)

    assert state.apply(metrics_message()) is True
    assert state.metrics is not None
    assert state.history.memory.latest == state.metrics.memory.percentage
    assert len(state.history.cpu) == 4


@pytest.mark.unit
def test_dashboard_state_alerts_and_traces_are_capped():
    state = DashboardState()

    for i in range(12):
        state.apply({"type": "alert", "alert": {"id": f"a{i}", "acknowledged": False}})
    for i in range(25):
        state.apply({"type": "trace", "trace": {"traceId": f"t{i}"}})

    assert len(state.alerts) == 10
    assert state.alerts[0]["id"] == "a11"
    assert len(state.traces) == 20
    assert state.traces[0]["traceId"] == "t24"

    state.apply({"type": "alerts", "alerts": [{"id": "x", "acknowledged": False}]})
    state.acknowledge("x")
    assert state.alerts == [{"id": "x", "acknowledged": True}]


@pytest.mark.unit
def test_dashboard_state_ignores_bad_messages():
    state = DashboardState()

    assert state.apply({"type": "pong"}) is False
    assert state.apply({"type": "metrics", "metrics": {"cpu": "busy"}}) is False
    assert state.apply({"type": "services"}) is False
    assert state.metrics is None


# ============================================================================
# OperationsFeed
# ============================================================================

class FakeSocket:
    def __init__(self, messages):
        self.messages = list(messages)
        self.sent = []
        self.closed = False

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self.messages:
            raise StopAsyncIteration
        return self.messages.pop(0)

    async def send(self, text):
        self.sent.append(text)

    async def close(self):
        self.closed = True


@pytest.mark.unit
async def test_operations_feed_applies_messages_and_reconnects():
    socket = FakeSocket(
        [
            safe_json_dumps(metrics_message()),
            "not json",
            safe_json_dumps({"type": "alerts", "alerts": [{"id": "cpu-high"}]}),
        ]
    )
    attempts = iter([socket, OSError("refused")])
    sleeps = []

    def connect(url):
        outcome = next(attempts)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    async def sleep(delay):
        sleeps.append(delay)
        if len(sleeps) == 2:
            await feed.stop()

    feed = OperationsFeed("ws://vrux.test/api/ws/operations", reconnect_delay=5.0, connect=connect, sleep=sleep)
    await feed.run()

    assert feed.attempts == 2
    assert sleeps == [5.0, 5.0]
    assert feed.connected is False
    assert feed.state.metrics is not None
    assert feed.state.alerts == [{"id": "cpu-high"}]


@pytest.mark.unit
async def test_operations_feed_ping_and_stop():
    sleeps = []

    class PingingSocket(FakeSocket):
        async def __anext__(self):
            if not self.sent:
                await feed.send_ping()
                await feed.stop()
            raise StopAsyncIteration

    socket = PingingSocket([])

    async def sleep(delay):
        sleeps.append(delay)

    feed = OperationsFeed("ws://vrux.test/api/ws/operations", connect=lambda url: socket, sleep=sleep)
    await feed.run()

    assert socket.sent == ['{"type":"ping"}']
    assert socket.closed is True
    assert feed.attempts == 1
    assert sleeps == []
