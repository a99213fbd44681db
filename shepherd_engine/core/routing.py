"""Static task routing table.

Each task names the provider best suited for it and a fallback provider used
when the primary call fails:

- Perplexity: real-time web research
- Claude: strategic planning and synthesis
- Groq: speed layer and fallback
"""

from collections.abc import Mapping

from shepherd_engine.core.schemas_orchestration import (
    Provider,
    ProviderProfile,
    RoutingConfig,
    RoutingOverrides,
    Task,
)

# Pricing per 1M tokens (input, output), used for estimates only
PROVIDER_PROFILES: dict[Provider, ProviderProfile] = {
    Provider.PERPLEXITY: ProviderProfile(
        provider=Provider.PERPLEXITY,
        default_model="sonar-deep-research",
        input_cost_per_million=2.0,
        output_cost_per_million=8.0,
        default_timeout_ms=90_000,
    ),
    Provider.CLAUDE: ProviderProfile(
        provider=Provider.CLAUDE,
        default_model="claude-sonnet-4-20250514",
        input_cost_per_million=3.0,
        output_cost_per_million=15.0,
        default_timeout_ms=45_000,
    ),
    Provider.GROQ: ProviderProfile(
        provider=Provider.GROQ,
        default_model="llama-3.3-70b-versatile",
        input_cost_per_million=0.05,
        output_cost_per_million=0.08,
        default_timeout_ms=15_000,
    ),
}


def _route(
    task: Task, primary: Provider, fallback: Provider, timeout_ms: int, retries: int
) -> RoutingConfig:
    return RoutingConfig(
        task=task,
        primary=primary,
        fallback=fallback,
        timeout_ms=timeout_ms,
        fallback_timeout_ms=PROVIDER_PROFILES[fallback].default_timeout_ms,
        retries=retries,
    )


TASK_ROUTING: dict[Task, RoutingConfig] = {
    # Perplexity can be slow; fewer retries since it is the expensive one
    Task.RESEARCH: _route(Task.RESEARCH, Provider.PERPLEXITY, Provider.GROQ, 120_000, 1),
    Task.PLANNING: _route(Task.PLANNING, Provider.CLAUDE, Provider.GROQ, 45_000, 2),
    Task.SYNTHESIS: _route(Task.SYNTHESIS, Provider.CLAUDE, Provider.GROQ, 30_000, 2),
    # AI knowledge only, no web
    Task.QUICK_RESEARCH: _route(Task.QUICK_RESEARCH, Provider.GROQ, Provider.CLAUDE, 15_000, 1),
    Task.VALIDATION: _route(Task.VALIDATION, Provider.PERPLEXITY, Provider.GROQ, 30_000, 2),
    Task.FALLBACK: _route(Task.FALLBACK, Provider.GROQ, Provider.CLAUDE, 15_000, 1),
}


def get_routing(
    task: Task | str, routing: Mapping[Task, RoutingConfig] | None = None
) -> RoutingConfig:
    """
    Look up the routing config for a task.

    Raises:
        KeyError: If the task is not declared (programmer error)
    """
    try:
        return (routing if routing is not None else TASK_ROUTING)[Task(task)]
    except ValueError as e:
        raise KeyError(f"Unknown task: {task}") from e


def resolve_routing(
    task: Task | str,
    overrides: RoutingOverrides | None = None,
    routing: Mapping[Task, RoutingConfig] | None = None,
) -> RoutingConfig:
    """
    Resolve the routing for one call, applying per-call overrides.

    The global table is never mutated; a new config is returned and re-validated,
    so an override that makes primary and fallback equal raises ValueError.
    Swapping the fallback also swaps in that provider's default timeout unless
    one is given explicitly.
    """
    config = get_routing(task, routing)
    if overrides is None:
        return config

    update = overrides.model_dump(exclude_none=True)
    if not update:
        return config
    if overrides.fallback is not None and overrides.fallback_timeout_ms is None:
        update["fallback_timeout_ms"] = PROVIDER_PROFILES[overrides.fallback].default_timeout_ms
    return RoutingConfig.model_validate({**config.model_dump(), **update})


def estimate_cost(task: Task | str, tokens_estimate: int) -> float:
    """
    Estimate the USD cost of a task on its primary provider.

    Assumes a 50/50 split between input and output tokens.
    """
    profile = PROVIDER_PROFILES[get_routing(task).primary]
    half = tokens_estimate * 0.5 / 1_000_000
    return half * profile.input_cost_per_million + half * profile.output_cost_per_million
