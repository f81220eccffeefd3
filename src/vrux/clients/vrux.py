"""VRUX API Client"""

from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
from typing import Any

import httpx

from ..core import JSONParseError, get_logger, loads
from ..streaming import StreamParser, VariantAccumulator

logger = get_logger(__name__)


class ClientError(Exception):
    """Non-2xx response from the service."""

    def __init__(self, status: int, message: str, payload: Any = None) -> None:
        super().__init__(f"{status}: {message}")
        self.status = status
        self.message = message
        self.payload = payload


def _error_message(payload: Any, fallback: str) -> str:
    if isinstance(payload, dict):
        return str(payload.get("message") or payload.get("error") or fallback)
    return fallback


class VruxClient:
    """
    Async client for the VRUX HTTP API.

    The session cookie set by ``sign_in``/``sign_up`` is kept on the
    underlying ``httpx.AsyncClient`` and sent with later calls.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize client.

        Args:
            base_url: Service root URL
            timeout: Request timeout in seconds
            transport: Custom transport, e.g. an ASGI app in tests
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "VruxClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return loads(response.content)
        except JSONParseError:
            return response.text

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error("client_request_failed", method=method, path=path, error=str(e))
            raise ClientError(0, str(e) or "Network error") from e

        payload = self._decode(response)
        if response.status_code >= 400:
            raise ClientError(response.status_code, _error_message(payload, response.reason_phrase), payload)
        return payload

    # Auth

    async def sign_up(self, email: str, password: str, name: str | None = None) -> dict[str, Any]:
        return await self._request("POST", "/api/auth/signup", json={"email": email, "password": password, "name": name})

    async def sign_in(self, email: str, password: str) -> dict[str, Any]:
        return await self._request("POST", "/api/auth/signin", json={"email": email, "password": password})

    async def sign_out(self) -> None:
        await self._request("POST", "/api/auth/signout")

    async def me(self) -> dict[str, Any]:
        return await self._request("GET", "/api/auth/me")

    async def update_profile(self, name: str | None = None, email: str | None = None) -> dict[str, Any]:
        body = {k: v for k, v in {"name": name, "email": email}.items() if v is not None}
        return await self._request("PUT", "/api/auth/update-profile", json=body)

    # Generation

    async def generate(self, prompt: str, **options: Any) -> dict[str, Any]:
        """Single component; ``options`` may carry model, temperature and maxTokens."""
        return await self._request("POST", "/api/generate-ui", json={"prompt": prompt, **options})

    async def generate_stream(
        self,
        prompt: str,
        variants: int = 3,
        model: str | None = None,
        temperature: float | None = None,
        style: str | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield parsed stream events as they arrive."""
        body: dict[str, Any] = {"prompt": prompt, "variants": variants}
        for key, value in (("model", model), ("temperature", temperature), ("style", style)):
            if value is not None:
                body[key] = value

        parser = StreamParser()
        async with self._client.stream("POST", "/api/generate-ui-stream", json=body) as response:
            if response.status_code >= 400:
                await response.aread()
                payload = self._decode(response)
                raise ClientError(response.status_code, _error_message(payload, response.reason_phrase), payload)

            async for text in response.aiter_text():
                for event in parser.feed(text):
                    yield event
        for event in parser.flush():
            yield event

        if parser.skipped:
            logger.debug("stream_lines_skipped", skipped=parser.skipped)

    async def generate_variants(self, prompt: str, variants: int = 3, **kwargs: Any) -> VariantAccumulator:
        """Consume the whole stream and return the accumulated variants."""
        accumulator = VariantAccumulator()
        async for event in self.generate_stream(prompt, variants, **kwargs):
            accumulator.apply(event)
        return accumulator

    # Templates

    async def templates(
        self, category: str | None = None, search: str | None = None, sort: str = "popular"
    ) -> dict[str, Any]:
        params = {k: v for k, v in {"category": category, "search": search, "sort": sort}.items() if v}
        return await self._request("GET", "/api/templates", params=params)

    async def use_template(self, template_id: str) -> dict[str, Any]:
        return await self._request("PUT", "/api/templates", json={"templateId": template_id})

    async def like_template(self, template_id: str) -> dict[str, Any]:
        return await self._request("POST", f"/api/templates/{template_id}/like")

    async def unlike_template(self, template_id: str) -> dict[str, Any]:
        return await self._request("DELETE", f"/api/templates/{template_id}/like")

    # Shares

    async def share(
        self,
        code: str,
        title: str,
        description: str | None = None,
        tags: list[str] | None = None,
        is_public: bool = True,
    ) -> dict[str, Any]:
        body = {"code": code, "title": title, "description": description, "tags": tags or [], "isPublic": is_public}
        return await self._request("POST", "/api/share", json=body)

    async def get_share(self, share_id: str) -> dict[str, Any]:
        payload = await self._request("GET", "/api/share", params={"id": share_id})
        return payload["share"]

    async def like_share(self, share_id: str) -> dict[str, Any]:
        return await self._request("POST", f"/api/share/{share_id}/like")

    # Operations

    async def metrics(self) -> dict[str, Any]:
        return await self._request("GET", "/api/operations/metrics")

    async def services(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/api/operations/services")

    async def alerts(self) -> list[dict[str, Any]]:
        return await self._request("GET", "/api/operations/alerts")

    async def acknowledge_alert(self, alert_id: str) -> dict[str, Any]:
        return await self._request("POST", f"/api/operations/alerts/{alert_id}/acknowledge")


LikeRequest = Callable[[bool], Awaitable[Mapping[str, Any] | None]]


class LikeToggle:
    """
    Optimistic like button state.

    ``toggle`` flips the state before the request completes. A failed
    request restores the previous state and re-raises; a successful one
    adopts the counts the server returned.
    """

    def __init__(self, liked: bool = False, likes: int = 0) -> None:
        self.liked = liked
        self.likes = likes

    async def toggle(self, request: LikeRequest) -> None:
        """
        Args:
            request: Called with the new liked state; returns ``{liked, likes}``
        """
        previous = (self.liked, self.likes)
        self.liked = not self.liked
        self.likes = max(0, self.likes + (1 if self.liked else -1))

        try:
            result = await request(self.liked)
        except Exception:
            self.liked, self.likes = previous
            raise

        if result:
            self.liked = bool(result.get("liked", self.liked))
            self.likes = int(result.get("likes", self.likes))
