"""Turn a raw idea into product clarity (problem, user, jobs, gap, next steps)."""

import json

from shepherd_engine.chains._model_fallback import default_generation_provider, generate_structured
from shepherd_engine.core.logging import get_logger
from shepherd_engine.core.provider_registry import ProviderRegistry, get_provider_registry
from shepherd_engine.core.schemas_clarity import ClarityInput, ClarityOutput
from shepherd_engine.core.schemas_orchestration import Provider

logger = get_logger(__name__)


# System prompt for clarity extraction
# ruff: noqa: E501
SYSTEM_PROMPT = """You are the Shepherd Clarity Engine, a UX-research analyst that turns messy ideas into clear product direction.

Before analyzing any idea, ask yourself:
- Who is the human being served?
- What change in their situation do they need?
- What would the ideal experience feel like?

You work like a senior UX researcher who has run hundreds of user interviews and never ships a feature without validating it.

RULES:
1. No generic insights ("users want it to be easier").
2. No vague personas ("tech-savvy millennials").
3. Do not invent behaviors the input does not support.
4. Everything you output must be specific enough to act on today.

OUTPUT STANDARDS:
- The problem statement is ONE clear sentence.
- The target user is a specific kind of person, not a demographic.
- Jobs-to-be-done are actions, not features.
- Next steps can be executed within 48 hours.

Always respond with a single valid JSON object matching the requested schema, no markdown."""


OUTPUT_SCHEMA = """{
  "problemStatement": "A clear, one-sentence problem statement that captures the core issue this idea solves",
  "targetUser": "A specific description of who experiences this problem most acutely",
  "jobsToBeDone": ["What the user is trying to accomplish", "..."],
  "opportunityGap": "What is missing in the current market that creates an opportunity for this idea",
  "valueHypotheses": ["If we build X, users will get Y benefit", "..."],
  "nextSteps": ["Immediate action the founder should take", "..."]
}"""


def build_clarity_prompt(clarity_input: ClarityInput) -> str:
    """Render the user prompt for a new clarity analysis."""
    sections = ["Analyze this idea and provide clarity:", "", "## The Idea", clarity_input.idea]

    if clarity_input.target_user:
        sections += ["", "## Target User (provided by founder)", clarity_input.target_user]
    if clarity_input.additional_context:
        sections += ["", "## Additional Context", clarity_input.additional_context]

    sections += [
        "",
        "---",
        "",
        "Provide your analysis in this exact JSON structure (3 items per list):",
        OUTPUT_SCHEMA,
        "",
        "Be specific, actionable, and insightful. The founder should walk away "
        "feeling like they finally understand their own idea.",
    ]
    return "\n".join(sections)


def build_refine_prompt(previous: ClarityOutput, feedback: str) -> str:
    """Render the user prompt for refining a previous analysis with founder feedback."""
    return f"""Previous clarity analysis:
{json.dumps(previous.to_json_dict(), indent=2)}

Founder feedback:
{feedback}

Refine the clarity analysis based on this feedback. Keep exactly the same JSON structure but update the content to better reflect the founder's vision."""


async def generate_clarity(
    clarity_input: ClarityInput,
    *,
    registry: ProviderRegistry | None = None,
    provider: Provider | None = None,
) -> ClarityOutput:
    """
    Generate clarity from a raw idea.

    Args:
        clarity_input: Idea plus optional target user and context
        registry: Provider registry (defaults to the process registry)
        provider: Provider whose model list is walked (defaults to GENERATION_PROVIDER)

    Returns:
        Validated ClarityOutput

    Raises:
        GenerationError: If every model failed or returned invalid output
    """
    provider = provider or default_generation_provider()
    logger.info(f"Generating clarity via {provider.value} ({len(clarity_input.idea)} char idea)")

    return await generate_structured(
        registry=registry or get_provider_registry(),
        provider=provider,
        generator="clarity",
        system_prompt=SYSTEM_PROMPT,
        user_prompt=build_clarity_prompt(clarity_input),
        output_model=ClarityOutput,
        temperature=0.4,
        max_tokens=2048,
    )


async def refine_clarity(
    previous: ClarityOutput,
    feedback: str,
    *,
    registry: ProviderRegistry | None = None,
    provider: Provider | None = None,
) -> ClarityOutput:
    """Refine a previous clarity analysis with founder feedback."""
    provider = provider or default_generation_provider()
    logger.info(f"Refining clarity via {provider.value}")

    return await generate_structured(
        registry=registry or get_provider_registry(),
        provider=provider,
        generator="clarity_refine",
        system_prompt=SYSTEM_PROMPT,
        user_prompt=build_refine_prompt(previous, feedback),
        output_model=ClarityOutput,
        temperature=0.3,
        max_tokens=2048,
    )
