"""Rework one decision (persona, feature, pain point, insight, competitor gap).

Refinement rewrites a decision from founder feedback; alternatives proposes
exactly three different takes on it. Both run as the `synthesis` task, so
Claude answers first and Groq steps in when Claude is unavailable.
"""

import json
import logging
from collections.abc import Callable
from typing import Any

from shepherd_engine.core.exceptions import OutputValidationError
from shepherd_engine.core.llm import parse_llm_json_dict, parse_llm_json_list
from shepherd_engine.core.logging import get_logger, log_with_context
from shepherd_engine.core.orchestrator import Orchestrator
from shepherd_engine.core.provider_registry import get_provider_registry
from shepherd_engine.core.schemas_decisions import (
    ALTERNATIVE_DECISION_TYPES,
    ALTERNATIVES_COUNT,
    AlternativeType,
    DecisionAlternatives,
    DecisionContext,
    DecisionType,
    RefinedDecision,
)
from shepherd_engine.core.schemas_orchestration import CallResult, OrchestrationOptions, Task

logger = get_logger(__name__)

REFINE_SYSTEM_PROMPT = (
    "You are a product strategy expert helping founders refine their decisions. "
    "Always return valid JSON matching the requested structure."
)

ALTERNATIVES_SYSTEM_PROMPT = (
    "You are a product strategy expert generating diverse alternatives to help founders "
    "explore options. Always return valid JSON arrays."
)

# ruff: noqa: E501
PERSONA_SHAPE = """{
  "name": "First name only",
  "role": "Their role or life situation",
  "goals": ["goal 1", "goal 2", "goal 3"],
  "frustrations": ["frustration 1", "frustration 2", "frustration 3"],
  "quote": "A realistic quote this persona would say"
}"""

FEATURE_SHAPE = """{
  "name": "Feature name",
  "description": "Clear feature description",
  "priority": "must-have|should-have|nice-to-have",
  "effort": "small|medium|large",
  "painPointsAddressed": ["pain point 1", "pain point 2"],
  "userStories": [{"asA": "user type", "iWant": "what they want", "soThat": "the benefit"}]
}"""

PAIN_POINT_SHAPE = """{
  "description": "Specific pain point",
  "frequency": "daily|weekly|monthly|rarely",
  "intensity": "critical|high|medium|low",
  "currentSolution": "What they currently do to address this"
}"""

INSIGHT_SHAPE = """{"text": "Actionable, product-focused insight"}"""

COMPETITOR_GAP_SHAPE = """{
  "competitor": "Competitor name or category",
  "weakness": "Where they fail the user",
  "opportunity": "How you can do better"
}"""

_SHAPES: dict[DecisionType, str] = {
    DecisionType.PERSONA: PERSONA_SHAPE,
    DecisionType.FEATURE: FEATURE_SHAPE,
    DecisionType.PAIN_POINT: PAIN_POINT_SHAPE,
    DecisionType.INSIGHT: INSIGHT_SHAPE,
    DecisionType.COMPETITOR_GAP: COMPETITOR_GAP_SHAPE,
}


def _joined(content: dict[str, Any], key: str) -> str:
    values = content.get(key) or []
    if isinstance(values, str):
        return values
    return ", ".join(str(v) for v in values)


def _describe_persona(content: dict[str, Any]) -> str:
    return f"""Persona:
- Name: {content.get('name', '')}
- Role: {content.get('role', '')}
- Goals: {_joined(content, "goals")}
- Frustrations: {_joined(content, "frustrations")}
- Quote: "{content.get('quote', '')}\""""


def _describe_feature(content: dict[str, Any]) -> str:
    return f"""Feature:
- Name: {content.get('name', '')}
- Description: {content.get('description', '')}
- Priority: {content.get('priority', '')}"""


def _describe_pain_point(content: dict[str, Any]) -> str:
    return f"""Pain Point:
- Description: {content.get('description', '')}
- Frequency: {content.get('frequency', '')}
- Intensity: {content.get('intensity', '')}
- Current Solution: {content.get('currentSolution', '')}"""


def _describe_insight(content: dict[str, Any]) -> str:
    text = content.get("text", "")
    return f'Insight: "{text}"'


def _describe_competitor_gap(content: dict[str, Any]) -> str:
    return f"""Gap:
- Competitor: {content.get('competitor', '')}
- Weakness: {content.get('weakness', '')}
- Opportunity: {content.get('opportunity', '')}"""


_DESCRIBERS: dict[DecisionType, Callable[[dict[str, Any]], str]] = {
    DecisionType.PERSONA: _describe_persona,
    DecisionType.FEATURE: _describe_feature,
    DecisionType.PAIN_POINT: _describe_pain_point,
    DecisionType.INSIGHT: _describe_insight,
    DecisionType.COMPETITOR_GAP: _describe_competitor_gap,
}

# What a refined version must stay, per decision type
_REFINE_GOALS: dict[DecisionType, tuple[str, str]] = {
    DecisionType.PERSONA: ("a user persona", "specific, realistic, and actionable"),
    DecisionType.FEATURE: ("an MVP feature", "focused, valuable, and realistic for an MVP"),
    DecisionType.PAIN_POINT: ("a user pain point", "specific, felt, and actionable"),
    DecisionType.INSIGHT: ("a product insight", "actionable and product-focused"),
    DecisionType.COMPETITOR_GAP: ("a competitor gap analysis", "specific and actionable"),
}

_ALTERNATIVE_CRITERIA: dict[DecisionType, tuple[str, list[str]]] = {
    DecisionType.PERSONA: (
        "user personas",
        [
            "Are distinct from the current one",
            "Face similar problems but from different angles",
            "Would benefit from the same solution",
            "Represent real, specific people (not stereotypes)",
        ],
    ),
    DecisionType.FEATURE: (
        "MVP features",
        [
            "Solve similar user problems",
            "Are realistic for an MVP",
            "Offer different approaches or angles",
            "Stay focused and achievable",
        ],
    ),
    DecisionType.PAIN_POINT: (
        "pain points",
        [
            "Affect the same target user",
            "Are related to the problem space",
            "Offer different angles or aspects",
            "Are specific and felt (not generic)",
        ],
    ),
    DecisionType.INSIGHT: (
        "product insights",
        [
            "Are actionable for product decisions",
            "Offer different perspectives",
            "Are specific and valuable",
            "Guide MVP development",
        ],
    ),
}


def build_refine_prompt(
    decision_type: DecisionType, original_content: dict[str, Any], user_request: str
) -> str:
    """Render the prompt that rewrites one decision around founder feedback."""
    subject, qualities = _REFINE_GOALS[decision_type]
    return f"""You are refining {subject} based on feedback.

Original {_DESCRIBERS[decision_type](original_content)}

User Feedback: "{user_request}"

Refine this to address the feedback while keeping it {qualities}.

Return ONLY valid JSON with this exact structure:
{_SHAPES[decision_type]}"""


def build_alternatives_prompt(
    decision_type: DecisionType,
    current_content: dict[str, Any],
    alternative_type: AlternativeType,
    context: DecisionContext,
) -> str:
    """
    Render the prompt asking for three alternatives to one decision.

    Raises:
        ValueError: If the decision type has no alternatives prompt
    """
    if decision_type not in ALTERNATIVE_DECISION_TYPES:
        raise ValueError(f"Alternatives are not available for decision type: {decision_type.value}")

    subject, criteria = _ALTERNATIVE_CRITERIA[decision_type]
    sections = [
        f"You are generating alternative {subject} for a product.",
        "",
        f"Current {_DESCRIBERS[decision_type](current_content)}",
        "",
        f"Problem Space: {context.problem_statement or 'Not specified'}",
        f"Target User: {context.target_user or 'Not specified'}",
        "",
        f"Alternative Type: {alternative_type}",
        "",
        f"Generate {ALTERNATIVES_COUNT} alternative {subject} that:",
        *(f"- {c}" for c in criteria),
        "",
        f"Return ONLY a valid JSON array of exactly {ALTERNATIVES_COUNT} objects, each with this structure:",
        _SHAPES[decision_type],
    ]
    return "\n".join(sections)


def _orchestrator(orchestrator: Orchestrator | None) -> Orchestrator:
    return orchestrator or Orchestrator(get_provider_registry())


def _snippet(content: str) -> str:
    return json.dumps(content[:80])


async def refine_decision(
    decision_type: DecisionType,
    original_content: dict[str, Any],
    user_request: str,
    *,
    orchestrator: Orchestrator | None = None,
) -> RefinedDecision:
    """
    Rewrite a decision to address founder feedback.

    Returns:
        The refined content plus the provider that produced it

    Raises:
        OrchestrationError: If Claude and the fallback both failed
        ConfigurationError: If the primary provider has no credential
        OutputValidationError: If the reply is not a JSON object
    """
    result = await _orchestrator(orchestrator).orchestrate(
        Task.SYNTHESIS,
        build_refine_prompt(decision_type, original_content, user_request),
        OrchestrationOptions(system_prompt=REFINE_SYSTEM_PROMPT, temperature=0.7, max_tokens=2048),
    )

    try:
        refined = parse_llm_json_dict(result.content)
    except (json.JSONDecodeError, TypeError) as e:
        raise OutputValidationError(result.model, f"unparseable refinement: {e}") from e

    log_with_context(
        logger,
        logging.INFO,
        "Decision refined",
        decision_type=decision_type.value,
        provider=result.provider.value,
    )
    return RefinedDecision(refined_content=refined, ai_provider=result.provider)


def _parse_alternatives(result: CallResult) -> list[dict[str, Any]]:
    try:
        alternatives = parse_llm_json_list(result.content)
    except (json.JSONDecodeError, TypeError) as e:
        raise OutputValidationError(
            result.model, f"unparseable alternatives {_snippet(result.content)}: {e}"
        ) from e

    if len(alternatives) != ALTERNATIVES_COUNT:
        raise OutputValidationError(
            result.model,
            f"expected {ALTERNATIVES_COUNT} alternatives, got {len(alternatives)}",
        )
    if not all(isinstance(a, dict) for a in alternatives):
        raise OutputValidationError(result.model, "every alternative must be a JSON object")
    return alternatives


async def generate_alternatives(
    decision_type: DecisionType,
    current_content: dict[str, Any],
    alternative_type: AlternativeType = "different_use_case",
    context: DecisionContext | None = None,
    *,
    orchestrator: Orchestrator | None = None,
) -> DecisionAlternatives:
    """
    Propose exactly three alternatives to a decision.

    Raises:
        ValueError: If the decision type has no alternatives prompt
        OrchestrationError: If Claude and the fallback both failed
        ConfigurationError: If the primary provider has no credential
        OutputValidationError: If the reply is not an array of exactly three objects
    """
    prompt = build_alternatives_prompt(
        decision_type, current_content, alternative_type, context or DecisionContext()
    )
    result = await _orchestrator(orchestrator).orchestrate(
        Task.SYNTHESIS,
        prompt,
        OrchestrationOptions(
            system_prompt=ALTERNATIVES_SYSTEM_PROMPT, temperature=0.9, max_tokens=3072
        ),
    )

    alternatives = _parse_alternatives(result)
    log_with_context(
        logger,
        logging.INFO,
        "Decision alternatives generated",
        decision_type=decision_type.value,
        alternative_type=alternative_type,
        provider=result.provider.value,
    )
    return DecisionAlternatives(alternatives=alternatives, ai_provider=result.provider)
