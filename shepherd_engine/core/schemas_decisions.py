"""Pydantic schemas for refining a single decision and exploring alternatives."""

from enum import Enum
from typing import Any, Literal

from pydantic import Field, field_validator

from shepherd_engine.core.schemas_base import CamelModel
from shepherd_engine.core.schemas_orchestration import Provider


class DecisionType(str, Enum):
    """Kinds of decision a founder can rework. Values match the camelCase wire keys."""

    PERSONA = "persona"
    FEATURE = "feature"
    PAIN_POINT = "painPoint"
    INSIGHT = "insight"
    COMPETITOR_GAP = "competitorGap"


# Competitor gaps can be refined but have no alternatives prompt
ALTERNATIVE_DECISION_TYPES = frozenset(
    {DecisionType.PERSONA, DecisionType.FEATURE, DecisionType.PAIN_POINT, DecisionType.INSIGHT}
)

AlternativeType = Literal["different_demographic", "different_use_case", "more_specific", "broader"]

ALTERNATIVES_COUNT = 3


class DecisionContext(CamelModel):
    """Clarity fields that anchor alternatives to the same problem space."""

    problem_statement: str | None = None
    target_user: str | None = None


class RefineDecisionRequest(CamelModel):
    decision_type: DecisionType
    original_content: dict[str, Any] = Field(..., min_length=1)
    user_request: str = Field(..., min_length=1, description="Founder feedback to address")


class DecisionAlternativesRequest(CamelModel):
    decision_type: DecisionType
    current_content: dict[str, Any] = Field(..., min_length=1)
    alternative_type: AlternativeType = "different_use_case"
    context: DecisionContext = Field(default_factory=DecisionContext)

    @field_validator("decision_type")
    @classmethod
    def _has_alternatives_prompt(cls, value: DecisionType) -> DecisionType:
        if value not in ALTERNATIVE_DECISION_TYPES:
            raise ValueError(f"Alternatives are not available for decision type: {value.value}")
        return value


class RefinedDecision(CamelModel):
    refined_content: dict[str, Any]
    ai_provider: Provider


class DecisionAlternatives(CamelModel):
    alternatives: list[dict[str, Any]] = Field(
        ..., min_length=ALTERNATIVES_COUNT, max_length=ALTERNATIVES_COUNT
    )
    ai_provider: Provider
