"""Provider registry: one adapter per configured provider, built once at startup."""

from collections.abc import Mapping
from functools import lru_cache

from shepherd_engine.core.anthropic_service import ClaudeAdapter
from shepherd_engine.core.config import Settings, get_settings
from shepherd_engine.core.exceptions import ConfigurationError
from shepherd_engine.core.groq_service import GroqAdapter
from shepherd_engine.core.logging import get_logger
from shepherd_engine.core.perplexity_service import PerplexityAdapter
from shepherd_engine.core.provider_base import ProviderAdapter
from shepherd_engine.core.routing import TASK_ROUTING
from shepherd_engine.core.schemas_orchestration import Provider, RoutingConfig, Task

logger = get_logger(__name__)

_KEY_NAMES = {
    Provider.PERPLEXITY: "PERPLEXITY_API_KEY",
    Provider.CLAUDE: "ANTHROPIC_API_KEY",
    Provider.GROQ: "GROQ_API_KEY",
}


class ProviderRegistry:
    """Read-only mapping of provider -> adapter, passed into the orchestrator."""

    def __init__(self, adapters: Mapping[Provider, ProviderAdapter]):
        self._adapters = dict(adapters)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProviderRegistry":
        """
        Build adapters for every provider that has a credential.

        Raises:
            ConfigurationError: If a credential is present but malformed
        """
        adapters: dict[Provider, ProviderAdapter] = {}
        if settings.PERPLEXITY_API_KEY:
            adapters[Provider.PERPLEXITY] = PerplexityAdapter(
                settings.PERPLEXITY_API_KEY, default_model=settings.PERPLEXITY_MODEL
            )
        if settings.ANTHROPIC_API_KEY:
            adapters[Provider.CLAUDE] = ClaudeAdapter(
                settings.ANTHROPIC_API_KEY, default_model=settings.CLAUDE_MODEL
            )
        if settings.GROQ_API_KEY:
            adapters[Provider.GROQ] = GroqAdapter(
                settings.GROQ_API_KEY, default_model=settings.GROQ_MODEL
            )

        logger.info(
            f"Provider registry built: {', '.join(p.value for p in adapters) or 'none'}"
        )
        return cls(adapters)

    @property
    def providers(self) -> list[Provider]:
        return list(self._adapters)

    def has(self, provider: Provider) -> bool:
        return provider in self._adapters

    def get(self, provider: Provider) -> ProviderAdapter:
        """
        Return the adapter for a provider.

        Raises:
            ConfigurationError: If the provider has no credential configured
        """
        try:
            return self._adapters[provider]
        except KeyError:
            raise ConfigurationError(
                f"{_KEY_NAMES[provider]} is required for provider '{provider.value}' "
                "but is not configured"
            ) from None

    def validate_routing(self, routing: Mapping[Task, RoutingConfig] | None = None) -> None:
        """
        Fail fast if any task's primary provider lacks a credential.

        Raises:
            ConfigurationError: Naming every missing key and the tasks that need it
        """
        table = routing if routing is not None else TASK_ROUTING
        missing: dict[Provider, list[str]] = {}
        for task, config in table.items():
            if not self.has(config.primary):
                missing.setdefault(config.primary, []).append(task.value)

        if missing:
            details = "; ".join(
                f"{_KEY_NAMES[p]} (primary for {', '.join(tasks)})" for p, tasks in missing.items()
            )
            raise ConfigurationError(f"Missing provider credentials: {details}")


@lru_cache(maxsize=1)
def get_provider_registry() -> ProviderRegistry:
    """
    Get the process-wide registry (built once from settings).

    Raises:
        ConfigurationError: If a key is malformed
    """
    return ProviderRegistry.from_settings(get_settings())
