"""Web research workflows run through the orchestrator.

Market and competitor research go to the `research` task; problem validation
goes to the `validation` task. Both prefer Perplexity for live, cited results
and fall back to Groq's model knowledge when Perplexity is unavailable.
"""

from shepherd_engine.core.orchestrator import Orchestrator
from shepherd_engine.core.perplexity_service import (
    competitor_research_request,
    market_research_request,
    problem_validation_request,
)
from shepherd_engine.core.provider_registry import get_provider_registry
from shepherd_engine.core.schemas_orchestration import (
    CallResult,
    OrchestrationOptions,
    Task,
)

RESEARCH_SYSTEM_PROMPT = (
    "You are a market research analyst. Provide detailed, factual information with "
    "specific company names, features, and data points. Always cite sources."
)


def _orchestrator(orchestrator: Orchestrator | None) -> Orchestrator:
    return orchestrator or Orchestrator(get_provider_registry())


async def run_market_research(
    problem_space: str,
    target_audience: str,
    *,
    orchestrator: Orchestrator | None = None,
) -> CallResult:
    """Size the market and surface user pain points for a problem space."""
    prompt, search = market_research_request(problem_space, target_audience)
    return await _orchestrator(orchestrator).orchestrate(
        Task.RESEARCH,
        prompt,
        OrchestrationOptions(system_prompt=RESEARCH_SYSTEM_PROMPT, perplexity_options=search),
    )


async def run_competitor_research(
    urls: list[str],
    *,
    orchestrator: Orchestrator | None = None,
) -> CallResult:
    """Analyse competitor sites; search is restricted to their domains."""
    if not urls:
        raise ValueError("At least one competitor URL is required")
    prompt, search = competitor_research_request(urls)
    return await _orchestrator(orchestrator).orchestrate(
        Task.RESEARCH,
        prompt,
        OrchestrationOptions(system_prompt=RESEARCH_SYSTEM_PROMPT, perplexity_options=search),
    )


async def run_problem_validation(
    problem_statement: str,
    *,
    orchestrator: Orchestrator | None = None,
) -> CallResult:
    """Look for evidence that a problem is real and people pay to solve it."""
    prompt, search = problem_validation_request(problem_statement)
    return await _orchestrator(orchestrator).orchestrate(
        Task.VALIDATION,
        prompt,
        OrchestrationOptions(system_prompt=RESEARCH_SYSTEM_PROMPT, perplexity_options=search),
    )
