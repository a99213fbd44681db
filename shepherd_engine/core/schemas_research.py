"""Pydantic schemas for user-research synthesis (personas, pain map, journey)."""

from pydantic import Field, HttpUrl, field_validator

from shepherd_engine.core.schemas_base import CamelModel
from shepherd_engine.core.schemas_clarity import ClarityOutput


class Persona(CamelModel):
    """A specific human, not a demographic."""

    name: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)
    goals: list[str] = Field(default_factory=list)
    frustrations: list[str] = Field(default_factory=list)
    quote: str = Field(..., min_length=1)


class PainPoint(CamelModel):
    """A felt pain with how often and how badly it hurts."""

    description: str = Field(default="")
    frequency: str = Field(default="", description="Usually daily, weekly, monthly or rarely")
    intensity: str = Field(default="", description="Usually critical, high, medium or low")
    current_solution: str = Field(default="", description="What they do today, even if inadequate")

    @field_validator("frequency", "intensity", mode="before")
    @classmethod
    def _normalize_enum(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class JourneyStage(CamelModel):
    """One stage of the emotional journey."""

    stage: str = Field(default="")
    emotion: str = Field(default="")
    thought: str = Field(default="")


class CompetitorGap(CamelModel):
    """Where an existing solution fails the user."""

    competitor: str = Field(default="")
    weakness: str = Field(default="")
    opportunity: str = Field(default="")


class ResearchOutput(CamelModel):
    """Synthesized user understanding. Never partially valid."""

    personas: list[Persona] = Field(..., min_length=1)
    pain_map: list[PainPoint] = Field(..., min_length=1)
    emotional_journey: list[JourneyStage] = Field(..., min_length=1)
    insights: list[str] = Field(..., min_length=1)
    competitor_gaps: list[CompetitorGap] = Field(default_factory=list)


class ResearchInput(CamelModel):
    """Input to full research synthesis."""

    clarity: ClarityOutput
    competitor_urls: list[HttpUrl] = Field(default_factory=list)
    additional_context: str | None = None
    include_market_research: bool = Field(
        default=False, description="Also run an orchestrated web market-research task"
    )
