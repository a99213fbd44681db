"""Anthropic (Claude) adapter for planning and synthesis tasks."""

from anthropic import AsyncAnthropic, AuthenticationError, RateLimitError

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

ANTHROPIC_KEY_PREFIX = "sk-ant-"

DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4096


def validate_anthropic_key(api_key: str | None) -> str:
    """
    Check that an Anthropic key is present and well-formed.

    Raises:
        ConfigurationError: If the key is missing or lacks the sk-ant- prefix
    """
    if not api_key:
        raise ConfigurationError("ANTHROPIC_API_KEY not configured in environment")
    if not api_key.startswith(ANTHROPIC_KEY_PREFIX):
        raise ConfigurationError(
            f"Invalid ANTHROPIC_API_KEY format - should start with {ANTHROPIC_KEY_PREFIX}"
        )
    return api_key


class ClaudeAdapter(ProviderAdapter):
    """Reasoning/synthesis provider backed by the Anthropic Messages API."""

    provider = Provider.CLAUDE

    def __init__(
        self,
        api_key: str,
        default_model: str = "claude-sonnet-4-20250514",
        client: AsyncAnthropic | None = None,
    ):
        super().__init__(default_model)
        validate_anthropic_key(api_key)
        # Retries belong to the orchestrator and generators, not the SDK
        self._client = client or AsyncAnthropic(api_key=api_key, max_retries=0)

    async def _complete(self, prompt: str, options: CallOptions) -> CallResult:
        model = self._model_for(options)
        kwargs = {
            "model": model,
            "max_tokens": options.max_tokens or DEFAULT_MAX_TOKENS,
            "temperature": (
                options.temperature if options.temperature is not None else DEFAULT_TEMPERATURE
            ),
            "messages": [{"role": "user", "content": prompt}],
        }
        if options.system_prompt:
            kwargs["system"] = options.system_prompt

        try:
            response = await self._client.messages.create(**kwargs)
        except AuthenticationError as e:
            raise ProviderError(self.provider.value, "Invalid Anthropic API key") from e
        except RateLimitError as e:
            raise ProviderError(
                self.provider.value, "Claude rate limit exceeded. Please try again in a moment."
            ) from e

        text = next(
            (block.text for block in response.content if getattr(block, "type", None) == "text"),
            None,
        )
        if not text:
            raise ProviderError(self.provider.value, "Unexpected response type from Claude")

        usage = None
        if getattr(response, "usage", None) is not None:
            tokens_in = response.usage.input_tokens or 0
            tokens_out = response.usage.output_tokens or 0
            usage = TokenUsage(
                prompt_tokens=tokens_in,
                completion_tokens=tokens_out,
                total_tokens=tokens_in + tokens_out,
            )

        logger.debug(f"Claude {model} returned {len(text)} chars")

        return CallResult(content=text, provider=self.provider, model=model, usage=usage)
