"""AI orchestration layer.

Routes each task to its primary provider and, if that call fails, to the
task's fallback provider. Attempts are strictly sequential: the fallback is
only called after the primary has failed, never raced against it.
"""

import asyncio
import logging
import time
from collections.abc import Mapping

from shepherd_engine.core.exceptions import (
    ConfigurationError,
    OrchestrationError,
    ProviderError,
    ProviderTimeoutError,
)
from shepherd_engine.core.llm_usage import log_llm_usage
from shepherd_engine.core.logging import get_logger, log_with_context
from shepherd_engine.core.provider_registry import ProviderRegistry, get_provider_registry
from shepherd_engine.core.routing import TASK_ROUTING, resolve_routing
from shepherd_engine.core.schemas_orchestration import (
    CallResult,
    OrchestrationOptions,
    OrchestrationState,
    Provider,
    RoutingConfig,
    Task,
)

logger = get_logger(__name__)

HEALTH_CHECK_PROMPT = "What is 2+2?"
HEALTH_CHECK_TIMEOUT_MS = 10_000


class Orchestrator:
    """Execute one task end-to-end with automatic provider failover."""

    def __init__(
        self,
        registry: ProviderRegistry,
        routing: Mapping[Task, RoutingConfig] | None = None,
    ):
        self.registry = registry
        self.routing = routing if routing is not None else TASK_ROUTING

    def _transition(
        self, task: Task, state: OrchestrationState, level: int, msg: str, **fields
    ) -> None:
        log_with_context(logger, level, msg, task=task.value, state=state.value, **fields)

    async def _attempt(
        self,
        task: Task,
        provider: Provider,
        prompt: str,
        timeout_ms: int,
        options: OrchestrationOptions,
    ) -> CallResult:
        adapter = self.registry.get(provider)
        started = time.monotonic()
        try:
            result = await adapter.call(prompt, timeout_ms, options.to_call_options())
        except (ProviderError, ConfigurationError):
            raise
        except Exception as e:
            # Adapters outside ProviderAdapter still fail over like any provider error
            raise ProviderError(provider.value, f"{type(e).__name__}: {e}") from e
        duration_ms = int((time.monotonic() - started) * 1000)
        log_llm_usage(result, task=task.value, duration_ms=duration_ms, chain="orchestrator")
        return result

    async def orchestrate(
        self,
        task: Task | str,
        prompt: str,
        options: OrchestrationOptions | None = None,
    ) -> CallResult:
        """
        Run a task on its primary provider, falling back once on failure.

        Args:
            task: Task name (must be declared in the routing table)
            prompt: User prompt
            options: System prompt, temperature, token cap, Perplexity search
                options and per-call routing overrides

        Returns:
            CallResult from whichever provider succeeded first

        Raises:
            KeyError: If the task is not declared
            ConfigurationError: If a selected provider has no credential
            OrchestrationError: If both primary and fallback failed
        """
        options = options or OrchestrationOptions()
        config = resolve_routing(task, options.provider_overrides, self.routing)
        task = config.task

        self._transition(
            task,
            OrchestrationState.NOT_STARTED,
            logging.INFO,
            f"Task: {task.value} -> Primary: {config.primary.value}, "
            f"Fallback: {config.fallback.value}",
            primary=config.primary.value,
            fallback=config.fallback.value,
            timeout_ms=config.timeout_ms,
            retries=config.retries,
        )

        attempts: list[ProviderError] = []

        self._transition(
            task, OrchestrationState.TRYING_PRIMARY, logging.DEBUG,
            f"Trying primary {config.primary.value}", provider=config.primary.value,
        )
        try:
            result = await self._attempt(task, config.primary, prompt, config.timeout_ms, options)
        except ProviderError as primary_error:
            attempts.append(primary_error)
            self._transition(
                task,
                OrchestrationState.TRYING_FALLBACK,
                logging.WARNING,
                f"Primary AI ({config.primary.value}) failed for {task.value}: {primary_error}",
                provider=config.fallback.value,
                timed_out=isinstance(primary_error, ProviderTimeoutError),
            )
        else:
            self._transition(
                task, OrchestrationState.SUCCEEDED, logging.INFO,
                f"Success with {config.primary.value}", provider=config.primary.value,
                total_tokens=result.usage.total_tokens if result.usage else None,
            )
            return result

        try:
            result = await self._attempt(
                task, config.fallback, prompt, config.fallback_timeout_ms, options
            )
        except ProviderError as fallback_error:
            attempts.append(fallback_error)
            self._transition(
                task,
                OrchestrationState.FAILED_TERMINAL,
                logging.ERROR,
                f"Fallback AI ({config.fallback.value}) also failed: {fallback_error}",
                provider=config.fallback.value,
                timed_out=isinstance(fallback_error, ProviderTimeoutError),
            )
            raise OrchestrationError(task.value, attempts) from fallback_error

        self._transition(
            task, OrchestrationState.SUCCEEDED, logging.INFO,
            f"Success with fallback {config.fallback.value}", provider=config.fallback.value,
            total_tokens=result.usage.total_tokens if result.usage else None,
        )
        return result

    async def health_check_all(self) -> dict[Provider, bool]:
        """Check every provider concurrently. Unconfigured or failing providers report False."""

        async def check(provider: Provider) -> bool:
            if not self.registry.has(provider):
                return False
            try:
                await self.registry.get(provider).call(
                    HEALTH_CHECK_PROMPT, HEALTH_CHECK_TIMEOUT_MS
                )
                return True
            except Exception as e:
                logger.warning(f"{provider.value} health check failed: {type(e).__name__}: {e}")
                return False

        providers = list(Provider)
        results = await asyncio.gather(*(check(p) for p in providers))
        return dict(zip(providers, results))


async def orchestrate(
    task: Task | str,
    prompt: str,
    options: OrchestrationOptions | None = None,
) -> CallResult:
    """Orchestrate a task using the process-wide provider registry."""
    return await Orchestrator(get_provider_registry()).orchestrate(task, prompt, options)
