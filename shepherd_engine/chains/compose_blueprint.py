"""Compose an MVP blueprint (features, roadmap, metrics, risks) from clarity and research."""

from shepherd_engine.chains._model_fallback import default_generation_provider, generate_structured
from shepherd_engine.core.logging import get_logger
from shepherd_engine.core.provider_registry import ProviderRegistry, get_provider_registry
from shepherd_engine.core.schemas_blueprint import BlueprintOutput
from shepherd_engine.core.schemas_clarity import ClarityOutput
from shepherd_engine.core.schemas_orchestration import Provider
from shepherd_engine.core.schemas_research import ResearchOutput

logger = get_logger(__name__)


# ruff: noqa: E501
SYSTEM_PROMPT = """You are the Shepherd Blueprint Engine, a product strategist that turns user understanding into a buildable action plan.

You solve pain points instead of brainstorming features. You build what validates, not what is cool. You plan in weeks, not years.

RULES:
1. MVP means minimum. Cut everything that does not prove the core value.
   Bad: "User authentication with social login and 2FA"
   Good: "Magic link login, one click to get in"
2. Features are pain killers, not vitamins.
   Bad: "Dashboard with analytics"
   Good: "One-click invoice generator"
3. User stories are testable in 10 minutes.
   Bad: "As a user, I want a great experience"
   Good: "As Marcus, I want to send an invoice in under 60 seconds so I can get back to designing"
4. The roadmap fits a solo founder:
   - Week 1: the core value only
   - Weeks 2-3: supporting flows
   - Week 4: polish and launch

Every feature must trace back to a specific pain point from the research.

Always respond with a single valid JSON object matching the requested schema, no markdown."""


OUTPUT_SCHEMA = """{
  "productVision": "One sentence that captures what this product will become",
  "mvpScope": "What the MVP will and won't do (2-3 sentences)",
  "coreValue": "The ONE thing users must experience to validate the idea",
  "features": [
    {
      "name": "Feature name",
      "description": "What it does",
      "priority": "must-have|should-have|nice-to-have",
      "effort": "small|medium|large",
      "painPointsAddressed": ["Pain point 1"],
      "userStories": [
        {"asA": "User type", "iWant": "What they want to do", "soThat": "The benefit", "acceptanceCriteria": ["Criterion"]}
      ]
    }
  ],
  "roadmap": [
    {"week": 1, "theme": "Theme for this week", "goals": ["Goal 1"], "deliverables": ["What will be done"]}
  ],
  "successMetrics": [
    {"metric": "What to measure", "target": "Target value", "why": "Why this matters"}
  ],
  "risks": [
    {"risk": "What could go wrong", "mitigation": "How to address it"}
  ],
  "launchChecklist": ["Action item 1", "Action item 2", "Action item 3"]
}"""


def build_blueprint_prompt(clarity: ClarityOutput, research: ResearchOutput) -> str:
    """Render the blueprint prompt from clarity and research outputs."""
    personas = "\n".join(
        f"- {p.name} ({p.role}): Goals: {', '.join(p.goals)}. Frustrations: {', '.join(p.frustrations)}"
        for p in research.personas
    )
    pains = "\n".join(
        f"- [{p.intensity}] {p.description} (Currently: {p.current_solution or 'nothing'})"
        for p in research.pain_map
    )
    insights = "\n".join(f"- {i}" for i in research.insights)
    gaps = (
        "\n".join(
            f"- {g.competitor}: {g.weakness} -> Opportunity: {g.opportunity}"
            for g in research.competitor_gaps
        )
        or "None identified"
    )

    return f"""Based on this clarity and user research, create an actionable MVP blueprint:

## Clarity
- Problem: {clarity.problem_statement}
- Target User: {clarity.target_user}
- Jobs to Be Done: {', '.join(clarity.jobs_to_be_done)}
- Opportunity: {clarity.opportunity_gap}
- Value Hypotheses: {'; '.join(clarity.value_hypotheses)}

## User Research
### Personas
{personas}

### Pain Points (by intensity)
{pains}

### Key Insights
{insights}

### Competitor Gaps
{gaps}

---

Create an MVP blueprint with this exact JSON structure:
{OUTPUT_SCHEMA}

Requirements:
- 3-5 features max for the MVP
- 2-4 week roadmap, realistic for a solo founder
- 2-3 must-have features, the rest should-have or nice-to-have
- User stories must be specific and testable
- Success metrics must be measurable"""


async def generate_blueprint(
    clarity: ClarityOutput,
    research: ResearchOutput,
    *,
    registry: ProviderRegistry | None = None,
    provider: Provider | None = None,
) -> BlueprintOutput:
    """
    Generate an MVP blueprint from clarity and research.

    Raises:
        GenerationError: If every model failed or returned invalid output
    """
    provider = provider or default_generation_provider()
    logger.info(
        f"Composing blueprint via {provider.value} from {len(research.personas)} personas, "
        f"{len(research.pain_map)} pain points"
    )

    return await generate_structured(
        registry=registry or get_provider_registry(),
        provider=provider,
        generator="blueprint",
        system_prompt=SYSTEM_PROMPT,
        user_prompt=build_blueprint_prompt(clarity, research),
        output_model=BlueprintOutput,
        temperature=0.4,
        max_tokens=4096,
    )
