"""Pydantic schemas for task routing and normalized provider results."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# =======================
# Enumerations
# =======================


class Task(str, Enum):
    """Abstract unit of AI work, independent of the provider executing it."""

    RESEARCH = "research"
    PLANNING = "planning"
    SYNTHESIS = "synthesis"
    QUICK_RESEARCH = "quick-research"
    VALIDATION = "validation"
    FALLBACK = "fallback"


class Provider(str, Enum):
    """External hosted AI services."""

    PERPLEXITY = "perplexity"  # web research with citations
    CLAUDE = "claude"  # reasoning and synthesis
    GROQ = "groq"  # fast, cheap fallback


class OrchestrationState(str, Enum):
    """States of a single orchestrated task."""

    NOT_STARTED = "not_started"
    TRYING_PRIMARY = "trying_primary"
    TRYING_FALLBACK = "trying_fallback"
    SUCCEEDED = "succeeded"
    FAILED_TERMINAL = "failed_terminal"


# =======================
# Provider and routing configuration
# =======================


class ProviderProfile(BaseModel):
    """Static facts about a provider: default model, pricing, default timeout."""

    model_config = ConfigDict(frozen=True)

    provider: Provider
    default_model: str
    input_cost_per_million: float = Field(..., ge=0)
    output_cost_per_million: float = Field(..., ge=0)
    default_timeout_ms: int = Field(..., gt=0)


class RoutingConfig(BaseModel):
    """Primary/fallback provider chain for one task."""

    model_config = ConfigDict(frozen=True)

    task: Task
    primary: Provider
    fallback: Provider
    timeout_ms: int = Field(..., gt=0, description="Timeout for the primary attempt")
    fallback_timeout_ms: int = Field(..., gt=0, description="Timeout for the fallback attempt")
    retries: int = Field(default=1, ge=0)

    @model_validator(mode="after")
    def _distinct_providers(self) -> "RoutingConfig":
        if self.primary == self.fallback:
            raise ValueError(
                f"primary and fallback must differ for task {self.task.value} "
                f"(both {self.primary.value})"
            )
        return self


class RoutingOverrides(BaseModel):
    """Per-call overrides applied on top of the static routing table."""

    primary: Provider | None = None
    fallback: Provider | None = None
    timeout_ms: int | None = Field(default=None, gt=0)
    fallback_timeout_ms: int | None = Field(default=None, gt=0)
    retries: int | None = Field(default=None, ge=0)


# =======================
# Call options and results
# =======================


class PerplexityOptions(BaseModel):
    """Perplexity-specific search tuning."""

    model: Literal["sonar-deep-research", "sonar-pro", "sonar-reasoning-pro", "sonar"] | None = None
    search_domain_filter: list[str] = Field(default_factory=list)
    search_recency: Literal["month", "week", "day"] | None = None
    search_academic: bool = False
    reasoning_effort: Literal["low", "medium", "high"] | None = None


class CallOptions(BaseModel):
    """Options accepted by every provider adapter."""

    system_prompt: str | None = None
    temperature: float | None = Field(default=None, ge=0, le=2)
    max_tokens: int | None = Field(default=None, gt=0)
    model: str | None = Field(default=None, description="Model override for this call")
    json_mode: bool = False
    perplexity: PerplexityOptions | None = None


class OrchestrationOptions(BaseModel):
    """Options accepted by Orchestrator.orchestrate()."""

    system_prompt: str | None = None
    temperature: float | None = Field(default=None, ge=0, le=2)
    max_tokens: int | None = Field(default=None, gt=0)
    perplexity_options: PerplexityOptions | None = None
    provider_overrides: RoutingOverrides | None = None

    def to_call_options(self) -> CallOptions:
        return CallOptions(
            system_prompt=self.system_prompt,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            perplexity=self.perplexity_options,
        )


class TokenUsage(BaseModel):
    """Token counters reported by a provider."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class CallResult(BaseModel):
    """Normalized success shape returned by every provider adapter."""

    content: str
    provider: Provider
    model: str
    citations: list[str] | None = None
    usage: TokenUsage | None = None
