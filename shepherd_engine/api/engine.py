"""API endpoints for clarity, research, blueprint and decision refinement."""

import time
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException

from shepherd_engine.chains.compose_blueprint import generate_blueprint
from shepherd_engine.chains.generate_clarity import generate_clarity, refine_clarity
from shepherd_engine.chains.refine_decision import generate_alternatives, refine_decision
from shepherd_engine.chains.research_workflows import (
    run_competitor_research,
    run_market_research,
    run_problem_validation,
)
from shepherd_engine.chains.synthesize_research import (
    synthesize_quick_research,
    synthesize_research,
)
from shepherd_engine.core.exceptions import (
    ConfigurationError,
    GenerationError,
    OrchestrationError,
    OutputValidationError,
)
from shepherd_engine.core.logging import get_logger
from shepherd_engine.core.orchestrator import Orchestrator
from shepherd_engine.core.provider_registry import ProviderRegistry, get_provider_registry
from shepherd_engine.core.routing import estimate_cost, get_routing
from shepherd_engine.core.schemas_blueprint import BlueprintOutput
from shepherd_engine.core.schemas_clarity import ClarityInput, ClarityOutput
from shepherd_engine.core.schemas_decisions import (
    DecisionAlternatives,
    DecisionAlternativesRequest,
    RefinedDecision,
    RefineDecisionRequest,
)
from shepherd_engine.core.schemas_engine import (
    BlueprintRequest,
    CompetitorResearchRequest,
    CostEstimate,
    CostEstimateRequest,
    EngineErrorDetail,
    EngineResponse,
    MarketResearchRequest,
    ProblemValidationRequest,
    ProviderHealth,
    RefineClarityRequest,
    ResearchRequest,
)
from shepherd_engine.core.schemas_orchestration import CallResult
from shepherd_engine.core.schemas_research import ResearchOutput

logger = get_logger(__name__)

router = APIRouter()


def get_registry() -> ProviderRegistry:
    """Process-wide provider registry (overridden in tests)."""
    return get_provider_registry()


def get_orchestrator(registry: ProviderRegistry = Depends(get_registry)) -> Orchestrator:
    return Orchestrator(registry)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _raise_http(step: str, error: Exception) -> NoReturn:
    """Map a terminal engine error onto an HTTP error the UI can act on."""
    if isinstance(error, ConfigurationError):
        status, reason = 500, "not_configured"
        message = f"{step} is not available: AI provider not configured"
    elif isinstance(error, OutputValidationError) or (
        isinstance(error, GenerationError) and error.reason == "invalid_output"
    ):
        status, reason = 502, "invalid_output"
        message = f"{step} failed: the AI returned a response we couldn't understand. Please try again."
    else:
        status, reason = 503, "providers_unavailable"
        message = f"{step} failed: AI providers are currently unavailable. Please try again later."

    logger.error(f"{message} ({error})")
    detail = EngineErrorDetail(error=message, reason=reason)
    raise HTTPException(status_code=status, detail=detail.model_dump(by_alias=True)) from error


@router.post("/engine/clarity", response_model=EngineResponse[ClarityOutput])
async def create_clarity(
    request: ClarityInput,
    registry: ProviderRegistry = Depends(get_registry),
) -> EngineResponse[ClarityOutput]:
    """Generate clarity from a raw idea."""
    started = time.monotonic()
    try:
        clarity = await generate_clarity(request, registry=registry)
    except (GenerationError, ConfigurationError) as e:
        _raise_http("Clarity generation", e)

    return EngineResponse(success=True, data=clarity, processing_time=_elapsed_ms(started))


@router.post("/engine/clarity/refine", response_model=EngineResponse[ClarityOutput])
async def refine_clarity_endpoint(
    request: RefineClarityRequest,
    registry: ProviderRegistry = Depends(get_registry),
) -> EngineResponse[ClarityOutput]:
    """Refine a clarity analysis with founder feedback."""
    started = time.monotonic()
    try:
        clarity = await refine_clarity(request.previous, request.feedback, registry=registry)
    except (GenerationError, ConfigurationError) as e:
        _raise_http("Clarity refinement", e)

    return EngineResponse(success=True, data=clarity, processing_time=_elapsed_ms(started))


@router.post("/engine/research", response_model=EngineResponse[ResearchOutput])
async def create_research(
    request: ResearchRequest,
    registry: ProviderRegistry = Depends(get_registry),
) -> EngineResponse[ResearchOutput]:
    """Synthesize personas and pain points, with or without web research."""
    started = time.monotonic()
    try:
        if request.quick:
            research = await synthesize_quick_research(request.clarity, registry=registry)
        else:
            research = await synthesize_research(request, registry=registry)
    except (GenerationError, ConfigurationError) as e:
        _raise_http("Research synthesis", e)

    return EngineResponse(success=True, data=research, processing_time=_elapsed_ms(started))


@router.post("/engine/blueprint", response_model=EngineResponse[BlueprintOutput])
async def create_blueprint(
    request: BlueprintRequest,
    registry: ProviderRegistry = Depends(get_registry),
) -> EngineResponse[BlueprintOutput]:
    """Compose an MVP blueprint from clarity and research."""
    started = time.monotonic()
    try:
        blueprint = await generate_blueprint(request.clarity, request.research, registry=registry)
    except (GenerationError, ConfigurationError) as e:
        _raise_http("Blueprint generation", e)

    return EngineResponse(success=True, data=blueprint, processing_time=_elapsed_ms(started))


@router.post("/engine/research/market", response_model=EngineResponse[CallResult])
async def market_research(
    request: MarketResearchRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> EngineResponse[CallResult]:
    """Run orchestrated market research (Perplexity, falling back to Groq)."""
    started = time.monotonic()
    try:
        result = await run_market_research(
            request.problem_space, request.target_audience, orchestrator=orchestrator
        )
    except (OrchestrationError, ConfigurationError) as e:
        _raise_http("Market research", e)

    return EngineResponse(success=True, data=result, processing_time=_elapsed_ms(started))


@router.post("/engine/research/competitors", response_model=EngineResponse[CallResult])
async def competitor_research(
    request: CompetitorResearchRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> EngineResponse[CallResult]:
    """Run orchestrated competitor research over the given sites."""
    started = time.monotonic()
    try:
        result = await run_competitor_research(
            [str(u) for u in request.urls], orchestrator=orchestrator
        )
    except (OrchestrationError, ConfigurationError) as e:
        _raise_http("Competitor research", e)

    return EngineResponse(success=True, data=result, processing_time=_elapsed_ms(started))


@router.post("/engine/research/validation", response_model=EngineResponse[CallResult])
async def problem_validation(
    request: ProblemValidationRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> EngineResponse[CallResult]:
    """Look for evidence that a problem is real."""
    started = time.monotonic()
    try:
        result = await run_problem_validation(request.problem_statement, orchestrator=orchestrator)
    except (OrchestrationError, ConfigurationError) as e:
        _raise_http("Problem validation", e)

    return EngineResponse(success=True, data=result, processing_time=_elapsed_ms(started))


@router.post("/engine/decisions/refine", response_model=EngineResponse[RefinedDecision])
async def refine_decision_endpoint(
    request: RefineDecisionRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> EngineResponse[RefinedDecision]:
    """Rewrite a persona, feature, pain point, insight or competitor gap from feedback."""
    started = time.monotonic()
    try:
        refined = await refine_decision(
            request.decision_type,
            request.original_content,
            request.user_request,
            orchestrator=orchestrator,
        )
    except (OrchestrationError, OutputValidationError, ConfigurationError) as e:
        _raise_http("Refinement", e)

    return EngineResponse(success=True, data=refined, processing_time=_elapsed_ms(started))


@router.post(
    "/engine/decisions/alternatives", response_model=EngineResponse[DecisionAlternatives]
)
async def decision_alternatives(
    request: DecisionAlternativesRequest,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> EngineResponse[DecisionAlternatives]:
    """Propose three alternatives to a decision."""
    started = time.monotonic()
    try:
        alternatives = await generate_alternatives(
            request.decision_type,
            request.current_content,
            request.alternative_type,
            request.context,
            orchestrator=orchestrator,
        )
    except (OrchestrationError, OutputValidationError, ConfigurationError) as e:
        _raise_http("Alternatives generation", e)

    return EngineResponse(success=True, data=alternatives, processing_time=_elapsed_ms(started))


@router.get("/engine/providers/health", response_model=ProviderHealth)
async def providers_health(
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> ProviderHealth:
    """Check every AI provider."""
    results = await orchestrator.health_check_all()
    return ProviderHealth(**{provider.value: ok for provider, ok in results.items()})


@router.post("/engine/cost-estimate", response_model=CostEstimate)
async def cost_estimate(request: CostEstimateRequest) -> CostEstimate:
    """Estimate the USD cost of a task on its primary provider."""
    return CostEstimate(
        task=request.task,
        provider=get_routing(request.task).primary,
        estimated_cost_usd=estimate_cost(request.task, request.tokens),
    )
