"""Gemini provider (google-generativeai)."""

from collections.abc import Iterator

import google.generativeai as genai

from ..core import LRUCache, get_logger
from .base import GenerationOptions, GenerationResult, RemoteProvider

logger = get_logger(__name__)


class GeminiProvider(RemoteProvider):
    """Gemini API wrapper; the SDK is blocking, so calls run in the executor."""

    name = "Gemini"
    supported_models = ("gemini-2.0-flash-exp", "gemini-1.5-pro", "gemini-1.5-flash")

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash-exp",
        temperature: float = 0.7,
        max_tokens: int = 2000,
        cache: LRUCache[GenerationResult] | None = None,
    ) -> None:
        super().__init__(cache)
        self.api_key = api_key
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        if api_key:
            genai.configure(api_key=api_key)
        logger.info("provider_init", provider=self.name, model=model, configured=self.configured)

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _model(self, model: str, system_prompt: str, options: GenerationOptions) -> "genai.GenerativeModel":
        generation_config = genai.GenerationConfig(
            temperature=options.temperature if options.temperature is not None else self.temperature,
            max_output_tokens=options.max_tokens or self.max_tokens,
            top_p=options.top_p,
        )
        return genai.GenerativeModel(
            model_name=model,
            generation_config=generation_config,
            system_instruction=system_prompt or None,
        )

    def _complete(
        self, prompt: str, system_prompt: str, model: str, options: GenerationOptions
    ) -> tuple[str, dict[str, int]]:
        response = self._model(model, system_prompt, options).generate_content(prompt)
        usage = getattr(response, "usage_metadata", None)
        counts = {}
        if usage is not None:
            counts = {
                "prompt_tokens": usage.prompt_token_count,
                "completion_tokens": usage.candidates_token_count,
                "total_tokens": usage.total_token_count,
            }
        return response.text, counts

    def _stream_text(
        self, prompt: str, system_prompt: str, model: str, options: GenerationOptions
    ) -> Iterator[str]:
        response = self._model(model, system_prompt, options).generate_content(prompt, stream=True)
        for chunk in response:
            if chunk.text:
                yield chunk.text

    def _ping(self) -> None:
        # Listing models authenticates without spending tokens
        next(iter(genai.list_models()), None)
