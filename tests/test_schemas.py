"""Tests for generator output schemas."""

import pytest
from pydantic import ValidationError

from shepherd_engine.core.schemas_blueprint import BlueprintOutput
from shepherd_engine.core.schemas_clarity import ClarityInput, ClarityOutput
from shepherd_engine.core.schemas_research import ResearchInput, ResearchOutput
from tests.fixtures_engine import BLUEPRINT, CLARITY, RESEARCH


class TestClarityOutput:
    def test_valid_camel_case(self):
        clarity = ClarityOutput.model_validate(CLARITY)
        assert clarity.problem_statement == CLARITY["problemStatement"]
        assert clarity.to_json_dict()["nextSteps"] == CLARITY["nextSteps"]

    def test_snake_case_accepted(self):
        clarity = ClarityOutput(
            problem_statement=CLARITY["problemStatement"],
            target_user=CLARITY["targetUser"],
            jobs_to_be_done=["x"],
            opportunity_gap=CLARITY["opportunityGap"],
            value_hypotheses=["h"],
            next_steps=["s"],
        )
        assert clarity.jobs_to_be_done == ["x"]

    def test_short_problem_statement_rejected(self):
        data = {
            "problemStatement": "short",
            "targetUser": "ok target user text",
            "jobsToBeDone": ["x"],
            "opportunityGap": "this is a sufficiently long opportunity gap text",
            "valueHypotheses": ["h"],
            "nextSteps": ["s"],
        }

        with pytest.raises(ValidationError) as exc:
            ClarityOutput.model_validate(data)

        locs = [err["loc"] for err in exc.value.errors()]
        assert locs == [("problemStatement",)]

    @pytest.mark.parametrize("field", ["jobsToBeDone", "valueHypotheses", "nextSteps"])
    def test_empty_lists_rejected(self, field):
        with pytest.raises(ValidationError):
            ClarityOutput.model_validate({**CLARITY, field: []})

    def test_missing_field_rejected(self):
        data = dict(CLARITY)
        del data["opportunityGap"]
        with pytest.raises(ValidationError):
            ClarityOutput.model_validate(data)

    def test_whitespace_does_not_count_toward_length(self):
        with pytest.raises(ValidationError):
            ClarityOutput.model_validate({**CLARITY, "targetUser": "   designer   "})


class TestClarityInput:
    def test_idea_too_short(self):
        with pytest.raises(ValidationError):
            ClarityInput(idea="app")

    def test_optional_fields(self):
        assert ClarityInput.model_validate({"idea": "A marketplace for used climbing gear"}).target_user is None


class TestResearchOutput:
    def test_enum_values_normalized(self):
        research = ResearchOutput.model_validate(RESEARCH)
        assert research.pain_map[0].frequency == "weekly"
        assert research.pain_map[0].intensity == "high"

    def test_free_form_pain_attributes_accepted(self):
        pain = {**RESEARCH["painMap"][0], "frequency": "Often", "intensity": "unbearable"}

        research = ResearchOutput.model_validate({**RESEARCH, "painMap": [pain]})

        assert research.pain_map[0].frequency == "often"
        assert research.pain_map[0].intensity == "unbearable"

    def test_sparse_list_items_accepted(self):
        data = {
            **RESEARCH,
            "painMap": [{"frequency": "daily"}],
            "emotionalJourney": [{"emotion": "anxious"}],
            "competitorGaps": [{"weakness": "slow"}],
        }

        research = ResearchOutput.model_validate(data)

        assert research.pain_map[0].description == ""
        assert research.emotional_journey[0].stage == ""
        assert research.competitor_gaps[0].competitor == ""

    def test_persona_without_quote_rejected(self):
        persona = {k: v for k, v in RESEARCH["personas"][0].items() if k != "quote"}
        with pytest.raises(ValidationError):
            ResearchOutput.model_validate({**RESEARCH, "personas": [persona]})

    def test_competitor_gaps_optional(self):
        data = {k: v for k, v in RESEARCH.items() if k != "competitorGaps"}
        assert ResearchOutput.model_validate(data).competitor_gaps == []

    def test_personas_required(self):
        with pytest.raises(ValidationError):
            ResearchOutput.model_validate({**RESEARCH, "personas": []})

    def test_input_validates_urls(self):
        with pytest.raises(ValidationError):
            ResearchInput.model_validate({"clarity": CLARITY, "competitorUrls": ["not a url"]})


class TestBlueprintOutput:
    def test_valid_blueprint(self):
        blueprint = BlueprintOutput.model_validate(BLUEPRINT)
        assert blueprint.features[0].priority == "must-have"
        assert blueprint.features[0].user_stories[0].as_a == "Marcus"
        assert blueprint.roadmap[0].week == 1

    def test_roadmap_week_must_be_positive(self):
        week = {**BLUEPRINT["roadmap"][0], "week": 0}
        with pytest.raises(ValidationError):
            BlueprintOutput.model_validate({**BLUEPRINT, "roadmap": [week]})

    def test_features_required(self):
        with pytest.raises(ValidationError):
            BlueprintOutput.model_validate({**BLUEPRINT, "features": []})
