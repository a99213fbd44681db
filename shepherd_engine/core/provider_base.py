"""Uniform adapter contract shared by every AI provider."""

import asyncio

from shepherd_engine.core.exceptions import (
    ConfigurationError,
    ProviderError,
    ProviderTimeoutError,
)
from shepherd_engine.core.logging import get_logger
from shepherd_engine.core.schemas_orchestration import CallOptions, CallResult, Provider

logger = get_logger(__name__)


class ProviderAdapter:
    """
    Translate (prompt, timeout, options) into one provider call.

    Subclasses implement `_complete`. This class owns the timer and the error
    normalization, so every adapter fails the same way:

    - timer expiry cancels the in-flight request and raises ProviderTimeoutError
    - any other failure is raised as ProviderError
    - ConfigurationError passes through untouched

    Adapters never retry.
    """

    provider: Provider

    def __init__(self, default_model: str):
        self.default_model = default_model

    async def call(
        self,
        prompt: str,
        timeout_ms: int,
        options: CallOptions | None = None,
    ) -> CallResult:
        """
        Run one completion under a timeout.

        Args:
            prompt: User prompt
            timeout_ms: Positive timeout in milliseconds
            options: Optional system prompt, temperature, token cap, model override

        Returns:
            CallResult normalized across providers

        Raises:
            ProviderTimeoutError: If the timer fired first
            ProviderError: On network failure, non-2xx status or empty response
            ConfigurationError: If the adapter is misconfigured
        """
        if timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {timeout_ms}")

        opts = options or CallOptions()
        try:
            return await asyncio.wait_for(self._complete(prompt, opts), timeout=timeout_ms / 1000)
        except asyncio.TimeoutError as e:
            logger.warning(f"{self.provider.value} call aborted after {timeout_ms}ms")
            raise ProviderTimeoutError(self.provider.value, timeout_ms) from e
        except (ProviderError, ConfigurationError):
            raise
        except Exception as e:
            raise ProviderError(self.provider.value, f"{type(e).__name__}: {e}") from e

    async def _complete(self, prompt: str, options: CallOptions) -> CallResult:
        raise NotImplementedError

    def _model_for(self, options: CallOptions) -> str:
        return options.model or self.default_model
