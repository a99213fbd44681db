"""Centralized LLM usage logger for token/cost tracking."""

from shepherd_engine.core.logging import get_logger
from shepherd_engine.core.schemas_orchestration import CallResult

logger = get_logger(__name__)

# Pricing per 1M tokens: (input, output)
MODEL_PRICING: dict[str, tuple[float, float]] = {
    # Anthropic
    "claude-sonnet-4-20250514": (3.0, 15.0),
    "claude-3-5-sonnet-20241022": (3.0, 15.0),
    "claude-3-haiku-20240307": (0.25, 1.25),
    # Groq
    "llama-3.3-70b-versatile": (0.59, 0.79),
    "llama-3.1-8b-instant": (0.05, 0.08),
    "openai/gpt-oss-120b": (0.15, 0.75),
    "openai/gpt-oss-20b": (0.10, 0.50),
    # Perplexity
    "sonar-deep-research": (2.0, 8.0),
    "sonar-reasoning-pro": (2.0, 8.0),
    "sonar-pro": (3.0, 15.0),
    "sonar": (1.0, 1.0),
}


def _pricing_for(model: str) -> tuple[float, float] | None:
    if model in MODEL_PRICING:
        return MODEL_PRICING[model]
    # Dated variants (e.g. claude-sonnet-4-20250901) share their family's price
    return next(
        (price for name, price in MODEL_PRICING.items() if model.startswith(name.rsplit("-", 1)[0])),
        None,
    )


def estimate_model_cost(model: str, tokens_input: int, tokens_output: int) -> float:
    """USD cost of one call, 0.0 for models without a known price."""
    pricing = _pricing_for(model)
    if pricing is None:
        logger.warning(f"No pricing for model '{model}', counting it as free")
        return 0.0

    per_input, per_output = pricing
    return round((tokens_input * per_input + tokens_output * per_output) / 1_000_000, 6)


def log_llm_usage(
    result: CallResult,
    task: str | None = None,
    duration_ms: int = 0,
    chain: str | None = None,
) -> float:
    """Log one successful provider call with its estimated cost. Fire-and-forget.

    Returns the estimated cost (0.0 when the provider reported no usage).
    """
    try:
        if result.usage is None:
            logger.debug(
                f"LLM call without usage: {task or '-'}/{chain or '-'} "
                f"provider={result.provider.value} model={result.model}"
            )
            return 0.0

        estimated_cost = estimate_model_cost(
            result.model, result.usage.prompt_tokens, result.usage.completion_tokens
        )
        logger.info(
            f"LLM usage: {task or '-'}/{chain or '-'} "
            f"provider={result.provider.value} model={result.model} "
            f"tokens={result.usage.prompt_tokens}+{result.usage.completion_tokens} "
            f"cost=${estimated_cost:.4f} duration_ms={duration_ms}"
        )
        return estimated_cost
    except Exception as e:
        # Usage logging must never fail the call it describes
        logger.error(f"Failed to log LLM usage: {e}")
        return 0.0
