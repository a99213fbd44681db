"""Synthesize user research (personas, pain map, emotional journey) from clarity.

Research gathering is best-effort: every web step degrades to a note in the
prompt when it fails. Only the synthesis itself can fail the request.
"""

from shepherd_engine.chains._model_fallback import default_generation_provider, generate_structured
from shepherd_engine.chains.research_workflows import run_market_research
from shepherd_engine.core.config import get_settings
from shepherd_engine.core.exceptions import ConfigurationError, OrchestrationError
from shepherd_engine.core.firecrawl_service import scrape_website_safe, search_web_safe
from shepherd_engine.core.logging import get_logger
from shepherd_engine.core.orchestrator import Orchestrator
from shepherd_engine.core.provider_registry import ProviderRegistry, get_provider_registry
from shepherd_engine.core.schemas_clarity import ClarityOutput
from shepherd_engine.core.schemas_orchestration import Provider
from shepherd_engine.core.schemas_research import ResearchInput, ResearchOutput

logger = get_logger(__name__)


# ruff: noqa: E501
SYSTEM_PROMPT = """You are the Shepherd Empathy Engine, a UX-research analyst that synthesizes raw data into deep human understanding.

You create humans, not demographics. You uncover frustrations, not feature lists. You synthesize from evidence instead of assuming.

RULES:
1. Personas are specific people, not stereotypes.
   Bad: "Tech-savvy millennial who values convenience"
   Good: "Marcus, a 28-year-old freelance designer juggling 4 clients with no invoicing system"
2. Pain points are felt, not theoretical.
   Bad: "Users find it difficult to manage tasks"
   Good: "Every Monday morning they realize they missed a client deadline over the weekend"
3. Insights are actionable, not obvious.
   Bad: "Users want a simple solution"
   Good: "Users abandon tools after 3 days if they require manual data entry"
4. Quotes sound real, not corporate.

Every persona should feel like someone you could call on the phone, and every insight should suggest a clear product decision.

Always respond with a single valid JSON object matching the requested schema, no markdown."""


OUTPUT_SCHEMA = """{
  "personas": [
    {
      "name": "A realistic first name",
      "role": "Their role or life situation",
      "goals": ["Goal 1", "Goal 2", "Goal 3"],
      "frustrations": ["Frustration 1", "Frustration 2", "Frustration 3"],
      "quote": "A realistic quote this persona might say"
    }
  ],
  "painMap": [
    {
      "description": "Specific pain point they experience",
      "frequency": "daily|weekly|monthly|rarely",
      "intensity": "critical|high|medium|low",
      "currentSolution": "What they do today, even if inadequate"
    }
  ],
  "emotionalJourney": [
    {"stage": "Stage name", "emotion": "Primary emotion", "thought": "What they are thinking"}
  ],
  "insights": ["Key insight that should inform product decisions"],
  "competitorGaps": [
    {"competitor": "Existing solution or workaround", "weakness": "Where it fails", "opportunity": "How to do better"}
  ]
}"""

NO_RESEARCH_NOTE = (
    "No external research available. Use your knowledge of similar markets, user types, "
    "and common patterns to synthesize realistic personas and insights."
)


def build_research_prompt(clarity: ClarityOutput, research: str) -> str:
    """Render the synthesis prompt from clarity and gathered research text."""
    return f"""Based on this clarity and research, synthesize deep user understanding:

## Clarity
- Problem: {clarity.problem_statement}
- Target User: {clarity.target_user}
- Jobs to Be Done: {', '.join(clarity.jobs_to_be_done)}
- Opportunity: {clarity.opportunity_gap}

## Research Data
{research}

---

Synthesize this into user understanding with this exact JSON structure:
{OUTPUT_SCHEMA}

Create 2-3 distinct personas, 4-6 pain points, 3-5 emotional journey stages, 3-5 insights, and 2-4 competitor gaps."""


def _format_search_results(heading: str, results: list[dict]) -> list[str]:
    lines = [heading]
    for i, item in enumerate(results, start=1):
        lines.append(f"{i}. {item.get('title', '')}: {item.get('description', '')}")
    return lines


async def gather_research(
    research_input: ResearchInput,
    *,
    orchestrator: Orchestrator | None = None,
) -> str:
    """
    Gather web research for synthesis.

    Steps, each optional and failure-tolerant:
    1. Firecrawl search for the target user's pain points
    2. Firecrawl search for existing solutions to the problem
    3. Scrape of the first few competitor URLs (truncated)
    4. Orchestrated market research (when requested)
    5. Founder-supplied additional context

    Returns:
        Research text for the synthesis prompt (a fallback note if nothing was found)
    """
    settings = get_settings()
    clarity = research_input.clarity
    parts: list[str] = []

    user_results = await search_web_safe(
        f"{clarity.target_user} pain points frustrations needs",
        limit=settings.RESEARCH_SEARCH_LIMIT,
    )
    if user_results:
        parts += _format_search_results("## User Research", user_results)

    competitor_results = await search_web_safe(
        f"{clarity.problem_statement} solutions apps tools",
        limit=settings.RESEARCH_SEARCH_LIMIT,
    )
    if competitor_results:
        parts += _format_search_results("\n## Competitor Research", competitor_results)

    urls = [str(u) for u in research_input.competitor_urls][: settings.RESEARCH_MAX_COMPETITOR_URLS]
    if urls:
        scraped = []
        for url in urls:
            page = await scrape_website_safe(url)
            if page and page.get("markdown"):
                content = page["markdown"][: settings.RESEARCH_SCRAPE_CHARS]
                scraped.append(f"\n### {url}\n{content}...")
        if scraped:
            parts.append("\n## Direct Competitor Analysis")
            parts += scraped

    if research_input.include_market_research:
        try:
            market = await run_market_research(
                clarity.problem_statement, clarity.target_user, orchestrator=orchestrator
            )
            parts.append(f"\n## Market Research ({market.provider.value})\n{market.content}")
            if market.citations:
                parts.append("Sources: " + ", ".join(market.citations[:10]))
        except (OrchestrationError, ConfigurationError) as e:
            logger.warning(f"Market research unavailable: {e}")
            parts.append("\n## Market Research\nNo market research available.")

    if research_input.additional_context:
        parts.append(f"\n## Additional Context\n{research_input.additional_context}")

    if not parts:
        return NO_RESEARCH_NOTE
    return "\n".join(parts)


async def synthesize_research(
    research_input: ResearchInput,
    *,
    registry: ProviderRegistry | None = None,
    provider: Provider | None = None,
) -> ResearchOutput:
    """
    Gather web research and synthesize personas, pain map, and insights.

    Raises:
        GenerationError: If every model failed or returned invalid output
    """
    registry = registry or get_provider_registry()
    research_text = await gather_research(research_input, orchestrator=Orchestrator(registry))
    return await _synthesize(research_input.clarity, research_text, registry, provider)


async def synthesize_quick_research(
    clarity: ClarityOutput,
    *,
    registry: ProviderRegistry | None = None,
    provider: Provider | None = None,
) -> ResearchOutput:
    """Synthesize from model knowledge only, without any web research."""
    return await _synthesize(clarity, NO_RESEARCH_NOTE, registry or get_provider_registry(), provider)


async def _synthesize(
    clarity: ClarityOutput,
    research_text: str,
    registry: ProviderRegistry,
    provider: Provider | None,
) -> ResearchOutput:
    provider = provider or default_generation_provider()
    logger.info(f"Synthesizing research via {provider.value} ({len(research_text)} chars of research)")

    return await generate_structured(
        registry=registry,
        provider=provider,
        generator="research",
        system_prompt=SYSTEM_PROMPT,
        user_prompt=build_research_prompt(clarity, research_text),
        output_model=ResearchOutput,
        temperature=0.5,
        max_tokens=4096,
    )
