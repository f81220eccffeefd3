"""OpenAI chat completions provider over httpx."""

from collections.abc import Iterator

import httpx

from ..core import JSONParseError, LRUCache, get_logger, loads_object
from .base import GenerationOptions, GenerationResult, ProviderError, RemoteProvider

logger = get_logger(__name__)

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 2000
DEFAULT_TOP_P = 1.0


class OpenAIProvider(RemoteProvider):
    """
    OpenAI provider.

    Talks to the REST API directly: ``POST /chat/completions`` for
    generation (SSE when streaming) and ``GET /models`` as health probe.
    """

    name = "OpenAI"
    supported_models = ("gpt-4o", "gpt-4-turbo", "gpt-4", "gpt-3.5-turbo")

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o",
        timeout: float = 30.0,
        cache: LRUCache[GenerationResult] | None = None,
    ) -> None:
        super().__init__(cache)
        self.api_key = api_key
        self.model = model
        self._client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {api_key}",
                "X-Client-Name": "VRUX",
            },
        )
        logger.info("provider_init", provider=self.name, model=model, configured=self.configured)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _payload(self, prompt: str, system_prompt: str, model: str, options: GenerationOptions) -> dict:
        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "temperature": options.temperature if options.temperature is not None else DEFAULT_TEMPERATURE,
            "max_tokens": options.max_tokens or DEFAULT_MAX_TOKENS,
            "top_p": options.top_p if options.top_p is not None else DEFAULT_TOP_P,
        }
        if options.user_id:
            payload["user"] = options.user_id
        return payload

    @staticmethod
    def _raise_for_status(response: httpx.Response) -> None:
        if response.status_code >= 400:
            raise ProviderError(
                f"OpenAI request failed ({response.status_code}): {response.text[:200]}",
                status=response.status_code,
            )

    def _complete(
        self, prompt: str, system_prompt: str, model: str, options: GenerationOptions
    ) -> tuple[str, dict[str, int]]:
        response = self._client.post("/chat/completions", json=self._payload(prompt, system_prompt, model, options))
        self._raise_for_status(response)

        data = response.json()
        choices = data.get("choices") or [{}]
        content = (choices[0].get("message") or {}).get("content") or ""
        return content, data.get("usage") or {}

    def _stream_text(
        self, prompt: str, system_prompt: str, model: str, options: GenerationOptions
    ) -> Iterator[str]:
        payload = self._payload(prompt, system_prompt, model, options)
        payload["stream"] = True

        with self._client.stream("POST", "/chat/completions", json=payload) as response:
            if response.status_code >= 400:
                response.read()
                self._raise_for_status(response)

            for line in response.iter_lines():
                if not line.startswith("data: "):
                    continue
                data = line[6:].strip()
                if data == "[DONE]":
                    break
                try:
                    event = loads_object(data)
                except JSONParseError:
                    logger.debug("stream_line_skipped", provider=self.name, line=data[:80])
                    continue
                choices = event.get("choices") or [{}]
                content = (choices[0].get("delta") or {}).get("content")
                if content:
                    yield content

    def _ping(self) -> None:
        response = self._client.get("/models")
        self._raise_for_status(response)

    def close(self) -> None:
        self._client.close()
