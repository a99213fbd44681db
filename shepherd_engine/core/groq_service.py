"""Groq adapter: the fast, cheap speed layer and fallback provider."""

from openai import AsyncOpenAI

from shepherd_engine.core.exceptions import ConfigurationError, ProviderError
from shepherd_engine.core.logging import get_logger
from shepherd_engine.core.provider_base import ProviderAdapter
from shepherd_engine.core.schemas_orchestration import (
    CallOptions,
    CallResult,
    Provider,
    TokenUsage,
)

logger = get_logger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4096


class GroqAdapter(ProviderAdapter):
    """Groq exposes an OpenAI-compatible chat completions endpoint."""

    provider = Provider.GROQ

    def __init__(
        self,
        api_key: str,
        default_model: str = "llama-3.3-70b-versatile",
        client: AsyncOpenAI | None = None,
    ):
        if not api_key:
            raise ConfigurationError("GROQ_API_KEY environment variable is required")
        super().__init__(default_model)
        self._client = client or AsyncOpenAI(
            api_key=api_key, base_url=GROQ_BASE_URL, max_retries=0
        )

    async def _complete(self, prompt: str, options: CallOptions) -> CallResult:
        model = self._model_for(options)

        messages = []
        if options.system_prompt:
            messages.append({"role": "system", "content": options.system_prompt})
        messages.append({"role": "user", "content": prompt})

        kwargs = {
            "model": model,
            "messages": messages,
            "temperature": (
                options.temperature if options.temperature is not None else DEFAULT_TEMPERATURE
            ),
            "max_tokens": options.max_tokens or DEFAULT_MAX_TOKENS,
        }
        if options.json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        completion = await self._client.chat.completions.create(**kwargs)

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise ProviderError(self.provider.value, "No content in Groq response")

        usage = None
        if getattr(completion, "usage", None) is not None:
            usage = TokenUsage(
                prompt_tokens=completion.usage.prompt_tokens or 0,
                completion_tokens=completion.usage.completion_tokens or 0,
                total_tokens=completion.usage.total_tokens or 0,
            )

        logger.debug(f"Groq {model} returned {len(content)} chars")

        return CallResult(content=content, provider=self.provider, model=model, usage=usage)

