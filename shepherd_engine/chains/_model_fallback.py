"""Same-provider model fallback for structured JSON generation.

The orchestrator switches providers when one is down. This loop stays on one
provider and switches models when a model answers with unusable output.
Each model in the ordered list gets the same prompt until one returns JSON
that passes the output schema.
"""

import json
import time
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from shepherd_engine.core.config import get_settings
from shepherd_engine.core.exceptions import (
    EngineError,
    GenerationError,
    OutputValidationError,
    ProviderError,
)
from shepherd_engine.core.llm import parse_llm_json
from shepherd_engine.core.llm_usage import log_llm_usage
from shepherd_engine.core.logging import get_logger
from shepherd_engine.core.provider_registry import ProviderRegistry
from shepherd_engine.core.schemas_orchestration import CallOptions, Provider

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)

# Ordered best-first; later entries are cheaper or more available
MODEL_FALLBACKS: dict[Provider, list[str]] = {
    Provider.GROQ: [
        "llama-3.3-70b-versatile",
        "openai/gpt-oss-120b",
        "openai/gpt-oss-20b",
        "llama-3.1-8b-instant",
    ],
    Provider.CLAUDE: [
        "claude-sonnet-4-20250514",
        "claude-3-5-sonnet-20241022",
        "claude-3-haiku-20240307",
    ],
}

DEFAULT_GENERATION_TIMEOUT_MS = 60_000


def default_generation_provider() -> Provider:
    """Provider configured for the domain generators (GENERATION_PROVIDER)."""
    return Provider(get_settings().GENERATION_PROVIDER)


async def generate_structured(
    *,
    registry: ProviderRegistry,
    provider: Provider,
    generator: str,
    system_prompt: str,
    user_prompt: str,
    output_model: type[T],
    temperature: float,
    max_tokens: int,
    models: list[str] | None = None,
    timeout_ms: int = DEFAULT_GENERATION_TIMEOUT_MS,
) -> T:
    """
    Generate a validated structured output, walking the provider's model list.

    Provider errors, JSON parse errors and schema validation errors all count
    as a failed attempt and advance to the next model.

    Args:
        registry: Provider registry supplying the adapter
        provider: Provider whose model list is walked
        generator: Name used in logs and errors (e.g. "clarity")
        system_prompt: Instructional system prompt
        user_prompt: Rendered user prompt
        output_model: Pydantic model the JSON must satisfy
        temperature: Sampling temperature
        max_tokens: Output token cap
        models: Explicit model list (defaults to MODEL_FALLBACKS[provider])
        timeout_ms: Timeout per attempt

    Returns:
        Validated output_model instance

    Raises:
        ConfigurationError: If the provider has no credential
        GenerationError: If every model failed
    """
    adapter = registry.get(provider)
    model_list = models if models is not None else MODEL_FALLBACKS[provider]
    attempts: list[EngineError] = []

    for model in model_list:
        options = CallOptions(
            system_prompt=system_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
            model=model,
            json_mode=True,
        )
        started = time.monotonic()
        try:
            result = await adapter.call(user_prompt, timeout_ms, options)
        except ProviderError as e:
            attempts.append(e)
            logger.warning(f"{generator}: {provider.value} model {model} failed: {e}")
            continue

        log_llm_usage(
            result,
            duration_ms=int((time.monotonic() - started) * 1000),
            chain=generator,
        )

        try:
            output = parse_llm_json(result.content, output_model)
        except (json.JSONDecodeError, TypeError, ValidationError) as e:
            error = OutputValidationError(model, _describe_parse_error(e))
            attempts.append(error)
            logger.warning(f"{generator}: model {model} returned unusable output: {error.message}")
            continue

        if attempts:
            logger.info(f"{generator}: succeeded with fallback model {model}")
        return output

    logger.error(f"{generator}: all {len(model_list)} {provider.value} models failed")
    raise GenerationError(generator, attempts)


def _describe_parse_error(error: Exception) -> str:
    if isinstance(error, ValidationError):
        fields = ", ".join(
            ".".join(str(part) for part in err["loc"]) or "<root>" for err in error.errors()
        )
        return f"schema validation failed for: {fields}"
    if isinstance(error, json.JSONDecodeError):
        return f"invalid JSON: {error.msg}"
    return str(error)
