"""Offline provider returning canned components picked by prompt keyword."""

import asyncio
import time
from collections.abc import AsyncGenerator

from ..core import get_logger, split_chunks
from .base import (
    AIProvider,
    GenerationMetrics,
    GenerationOptions,
    GenerationResult,
    ProviderHealth,
    StreamChunk,
    calculate_quality_score,
    estimate_tokens,
    now_utc,
)

logger = get_logger(__name__)

CHUNK_SIZE = 50
CHUNK_DELAY = 0.03

BUTTON_COMPONENT = """() => {
  const [count, setCount] = React.useState(0);
  const [isHovered, setIsHovered] = React.useState(false);

  return (
    <button
      onClick={() => setCount(count + 1)}
      onMouseEnter={() => setIsHovered(true)}
      onMouseLeave={() => setIsHovered(false)}
      className="relative px-8 py-4 bg-gradient-to-r from-purple-600 to-pink-600 text-white font-bold rounded-xl shadow-lg hover:shadow-xl transform transition-all duration-200 hover:scale-105 active:scale-95 focus:outline-none focus:ring-4 focus:ring-purple-500 focus:ring-opacity-50"
      aria-label="Interactive counter button"
    >
      <span className="relative z-10">
        {count > 0 ? `Clicked ${count} times` : 'Click Me!'}
      </span>
      {isHovered && (
        <span className="absolute inset-0 bg-white opacity-20 rounded-xl animate-pulse" />
      )}
    </button>
  );
}"""

CARD_COMPONENT = """() => {
  const [isLiked, setIsLiked] = React.useState(false);

  return (
    <div className="max-w-sm bg-white dark:bg-gray-800 rounded-2xl shadow-xl overflow-hidden transform transition-all duration-300 hover:scale-105">
      <div className="h-48 bg-gradient-to-br from-purple-400 via-pink-500 to-red-500" />
      <div className="p-6">
        <h3 className="text-2xl font-bold text-gray-900 dark:text-white mb-2">
          Premium Card Component
        </h3>
        <p className="text-gray-600 dark:text-gray-300 mb-4">
          This is a beautifully designed card component with hover effects and dark mode support.
        </p>
        <div className="flex items-center justify-between">
          <button className="px-4 py-2 bg-purple-600 text-white rounded-lg hover:bg-purple-700 transition-colors">
            Learn More
          </button>
          <button
            onClick={() => setIsLiked(!isLiked)}
            className="p-2 rounded-full hover:bg-gray-100 dark:hover:bg-gray-700 transition-colors"
            aria-label="Like this card"
          >
            <svg className={`w-6 h-6 ${isLiked ? 'text-red-500 fill-current' : 'text-gray-400'}`} viewBox="0 0 24 24">
              <path d="M12 21.35l-1.45-1.32C5.4 15.36 2 12.28 2 8.5 2 5.42 4.42 3 7.5 3c1.74 0 3.41.81 4.5 2.09C13.09 3.81 14.76 3 16.5 3 19.58 3 22 5.42 22 8.5c0 3.78-3.4 6.86-8.55 11.54L12 21.35z"/>
            </svg>
          </button>
        </div>
      </div>
    </div>
  );
}"""

FORM_COMPONENT = """() => {
  const [formData, setFormData] = React.useState({ name: '', email: '', message: '' });
  const [isSubmitting, setIsSubmitting] = React.useState(false);

  const handleSubmit = async (e) => {
    e.preventDefault();
    setIsSubmitting(true);
    await new Promise(resolve => setTimeout(resolve, 2000));
    alert('Form submitted successfully!');
    setIsSubmitting(false);
    setFormData({ name: '', email: '', message: '' });
  };

  return (
    <form onSubmit={handleSubmit} className="max-w-md mx-auto p-6 bg-white dark:bg-gray-800 rounded-xl shadow-lg">
      <h2 className="text-2xl font-bold text-gray-900 dark:text-white mb-6">Contact Us</h2>
      <div className="space-y-4">
        <div>
          <label className="block text-sm font-medium text-gray-700 dark:text-gray-300 mb-1">
            Name
          </label>
          <input
            type="text"
            required
            value={formData.name}
            onChange={(e) => setFormData({...formData, name: e.target.value})}
            className="w-full px-4 py-2 border border-gray-300 dark:border-gray-600 rounded-lg focus:ring-2 focus:ring-purple-500 focus:border-transparent dark:bg-gray-700 dark:text-white"
          />
        </div>
        <div>
          <label className="block text-sm font-medium text-gray-700 dark:text-gray-300 mb-1">
            Email
          </label>
          <input
            type="email"
            required
            value={formData.email}
            onChange={(e) => setFormData({...formData, email: e.target.value})}
            className="w-full px-4 py-2 border border-gray-300 dark:border-gray-600 rounded-lg focus:ring-2 focus:ring-purple-500 focus:border-transparent dark:bg-gray-700 dark:text-white"
          />
        </div>
        <div>
          <label className="block text-sm font-medium text-gray-700 dark:text-gray-300 mb-1">
            Message
          </label>
          <textarea
            required
            rows={4}
            value={formData.message}
            onChange={(e) => setFormData({...formData, message: e.target.value})}
            className="w-full px-4 py-2 border border-gray-300 dark:border-gray-600 rounded-lg focus:ring-2 focus:ring-purple-500 focus:border-transparent dark:bg-gray-700 dark:text-white"
          />
        </div>
        <button
          type="submit"
          disabled={isSubmitting}
          className="w-full py-3 bg-gradient-to-r from-purple-600 to-pink-600 text-white font-semibold rounded-lg shadow-md hover:shadow-lg transform transition-all duration-200 hover:scale-105 disabled:opacity-50 disabled:cursor-not-allowed"
        >
          {isSubmitting ? 'Submitting...' : 'Send Message'}
        </button>
      </div>
    </form>
  );
}"""

GENERIC_COMPONENT = """() => {
  const [isVisible, setIsVisible] = React.useState(false);

  React.useEffect(() => {
    setIsVisible(true);
  }, []);

  return (
    <div className={`p-8 bg-gradient-to-br from-purple-500 via-pink-500 to-red-500 rounded-2xl shadow-2xl transform transition-all duration-1000 ${isVisible ? 'opacity-100 scale-100' : 'opacity-0 scale-95'}`}>
      <h1 className="text-4xl font-bold text-white mb-4 animate-pulse">
        AI Generated Component
      </h1>
      <p className="text-white/90 text-lg mb-6">
        This component was generated based on your prompt. It includes animations, state management, and responsive design.
      </p>
      <div className="bg-white/20 backdrop-blur-md rounded-xl p-6">
        <p className="text-white/90 text-sm font-mono">
          Prompt: "{prompt_excerpt}"
        </p>
      </div>
      <div className="mt-6 flex gap-4">
        <button className="px-6 py-3 bg-white text-purple-600 font-semibold rounded-lg hover:bg-gray-100 transition-colors">
          Primary Action
        </button>
        <button className="px-6 py-3 bg-white/20 text-white font-semibold rounded-lg hover:bg-white/30 transition-colors">
          Secondary Action
        </button>
      </div>
    </div>
  );
}"""


def pick_component(prompt: str) -> str:
    """Choose a canned component by the first matching keyword."""
    lowered = prompt.lower()
    if "button" in lowered:
        return BUTTON_COMPONENT
    if "card" in lowered:
        return CARD_COMPONENT
    if "form" in lowered:
        return FORM_COMPONENT

    excerpt = prompt[:100] + ("..." if len(prompt) > 100 else "")
    # str.replace, the template is full of JSX braces
    return GENERIC_COMPONENT.replace("{prompt_excerpt}", excerpt)


class MockProvider(AIProvider):
    """Always-available provider for development and as the last fallback."""

    name = "Mock"
    supported_models = ("mock-v1",)

    def __init__(self, chunk_delay: float = CHUNK_DELAY) -> None:
        self.chunk_delay = chunk_delay

    async def is_available(self) -> bool:
        return True

    async def health(self) -> ProviderHealth:
        return ProviderHealth(available=True, latency=50, last_checked=now_utc())

    async def generate(
        self, prompt: str, system_prompt: str, options: GenerationOptions | None = None
    ) -> GenerationResult:
        options = options or GenerationOptions()
        start = time.perf_counter()
        logger.info("mock_generation", request_id=options.request_id)

        content = pick_component(prompt)
        return GenerationResult(
            content=content,
            metrics=GenerationMetrics(
                prompt_tokens=estimate_tokens(prompt),
                completion_tokens=estimate_tokens(content),
                total_tokens=estimate_tokens(prompt + content),
                latency=(time.perf_counter() - start) * 1000,
                provider=self.name,
                model=self.default_model,
                quality=calculate_quality_score(content),
            ),
        )

    async def stream(
        self, prompt: str, system_prompt: str, options: GenerationOptions | None = None
    ) -> AsyncGenerator[StreamChunk, None]:
        result = await self.generate(prompt, system_prompt, options)

        first = True
        for piece in split_chunks(result.content, CHUNK_SIZE):
            yield StreamChunk(
                content=piece,
                is_first=first,
                metrics={"provider": self.name, "model": self.default_model, "cached": False} if first else None,
            )
            first = False
            await asyncio.sleep(self.chunk_delay)

        yield StreamChunk(content="", is_last=True, metrics=result.metrics.model_dump(by_alias=True))
