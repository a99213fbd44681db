"""Request/response schemas for the engine HTTP endpoints."""

from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, Field, HttpUrl

from shepherd_engine.core.schemas_base import CamelModel
from shepherd_engine.core.schemas_clarity import ClarityOutput
from shepherd_engine.core.schemas_orchestration import Provider, Task
from shepherd_engine.core.schemas_research import ResearchInput, ResearchOutput

T = TypeVar("T")


class EngineResponse(CamelModel, Generic[T]):
    """Envelope returned by successful engine endpoints; failures use EngineErrorDetail."""

    success: bool
    data: T | None = None
    error: str | None = None
    processing_time: int | None = Field(default=None, description="Milliseconds")


class EngineErrorDetail(CamelModel):
    """Body of a failed engine request (HTTPException detail)."""

    success: Literal[False] = False
    error: str
    reason: Literal[
        "providers_unavailable", "invalid_output", "not_configured"
    ] = Field(..., description="Drives remediation: retry later vs retry now vs fix config")


class RefineClarityRequest(CamelModel):
    previous: ClarityOutput
    feedback: str = Field(..., min_length=1)


class ResearchRequest(ResearchInput):
    quick: bool = Field(default=False, description="Skip web research, use model knowledge only")


class BlueprintRequest(CamelModel):
    clarity: ClarityOutput
    research: ResearchOutput


class MarketResearchRequest(CamelModel):
    problem_space: str = Field(..., min_length=1)
    target_audience: str = Field(..., min_length=1)


class CompetitorResearchRequest(CamelModel):
    urls: list[HttpUrl] = Field(..., min_length=1)


class ProblemValidationRequest(CamelModel):
    problem_statement: str = Field(..., min_length=1)


class CostEstimateRequest(CamelModel):
    task: Task
    tokens: int = Field(..., gt=0)


class CostEstimate(CamelModel):
    task: Task
    provider: Provider
    estimated_cost_usd: float


class ProviderHealth(BaseModel):
    perplexity: bool
    claude: bool
    groq: bool
