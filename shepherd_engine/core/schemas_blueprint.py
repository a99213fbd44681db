"""Pydantic schemas for MVP blueprint composition."""

from typing import Literal

from pydantic import Field, field_validator

from shepherd_engine.core.schemas_base import CamelModel


class UserStory(CamelModel):
    as_a: str = Field(..., min_length=1)
    i_want: str = Field(..., min_length=1)
    so_that: str = Field(..., min_length=1)
    acceptance_criteria: list[str] = Field(default_factory=list)


class BlueprintFeature(CamelModel):
    """A pain killer, traced to the pain points it addresses."""

    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    priority: Literal["must-have", "should-have", "nice-to-have"]
    effort: str | None = Field(default=None, description="small|medium|large")
    pain_points_addressed: list[str] = Field(default_factory=list)
    user_stories: list[UserStory] = Field(default_factory=list)

    @field_validator("priority", mode="before")
    @classmethod
    def _normalize_priority(cls, value):
        return value.strip().lower() if isinstance(value, str) else value


class RoadmapWeek(CamelModel):
    week: int = Field(..., ge=1)
    theme: str = Field(..., min_length=1)
    goals: list[str]
    deliverables: list[str] = Field(default_factory=list)


class SuccessMetric(CamelModel):
    metric: str = Field(..., min_length=1)
    target: str = Field(default="")
    why: str = Field(default="")


class Risk(CamelModel):
    risk: str = Field(..., min_length=1)
    mitigation: str = Field(default="")


class BlueprintOutput(CamelModel):
    """Actionable MVP plan. Never partially valid."""

    product_vision: str = Field(..., min_length=1)
    mvp_scope: str = Field(..., min_length=1)
    core_value: str = Field(..., min_length=1)
    features: list[BlueprintFeature] = Field(..., min_length=1)
    roadmap: list[RoadmapWeek] = Field(..., min_length=1)
    success_metrics: list[SuccessMetric] = Field(default_factory=list)
    risks: list[Risk] = Field(default_factory=list)
    launch_checklist: list[str] = Field(default_factory=list)
