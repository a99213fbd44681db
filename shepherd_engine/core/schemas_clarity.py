"""Pydantic schemas for clarity generation (raw idea -> product clarity)."""

from pydantic import Field

from shepherd_engine.core.schemas_base import CamelModel

# Minimum lengths reject degenerate model output; they carry no business meaning
MIN_PROBLEM_STATEMENT_CHARS = 20
MIN_TARGET_USER_CHARS = 10
MIN_OPPORTUNITY_GAP_CHARS = 20


class ClarityInput(CamelModel):
    """Founder-supplied idea plus optional context."""

    idea: str = Field(..., min_length=10, description="The raw idea")
    target_user: str | None = Field(default=None, description="Target user, if known")
    additional_context: str | None = Field(default=None, description="Anything else relevant")


class ClarityOutput(CamelModel):
    """Clarity extracted from an idea. Never partially valid."""

    problem_statement: str = Field(
        ..., min_length=MIN_PROBLEM_STATEMENT_CHARS, description="One-sentence problem statement"
    )
    target_user: str = Field(
        ..., min_length=MIN_TARGET_USER_CHARS, description="Who feels the problem most"
    )
    jobs_to_be_done: list[str] = Field(..., min_length=1, description="What the user is trying to do")
    opportunity_gap: str = Field(
        ..., min_length=MIN_OPPORTUNITY_GAP_CHARS, description="What the market is missing"
    )
    value_hypotheses: list[str] = Field(..., min_length=1, description="If we build X, users get Y")
    next_steps: list[str] = Field(..., min_length=1, description="Executable within 48 hours")
