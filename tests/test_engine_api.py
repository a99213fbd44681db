"""Tests for the engine HTTP endpoints (providers faked via dependency overrides)."""

import json

import pytest
from fastapi.testclient import TestClient

from shepherd_engine.api.engine import get_registry
from shepherd_engine.core.exceptions import ProviderError
from shepherd_engine.core.schemas_orchestration import Provider
from shepherd_engine.main import app
from tests.fakes.fake_providers import BareAdapter, ScriptedAdapter, make_registry
from tests.fixtures_engine import BLUEPRINT, CLARITY, RESEARCH, as_json

IDEA = {"idea": "An app that helps freelance designers get paid on time"}


@pytest.fixture
def client_with():
    """Build a TestClient whose registry holds the given adapters."""

    def _client(**adapters) -> TestClient:
        registry = make_registry(**adapters)
        app.dependency_overrides[get_registry] = lambda: registry
        return TestClient(app)

    yield _client
    app.dependency_overrides.clear()


def _groq(*script) -> ScriptedAdapter:
    return ScriptedAdapter(Provider.GROQ, list(script))


class TestClarityEndpoints:
    def test_create_clarity(self, client_with):
        response = client_with(groq=_groq(as_json(CLARITY))).post("/v1/engine/clarity", json=IDEA)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"]["problemStatement"] == CLARITY["problemStatement"]
        assert body["processingTime"] >= 0

    def test_invalid_output_is_502(self, client_with):
        response = client_with(groq=_groq('{"problemStatement": "short"}')).post(
            "/v1/engine/clarity", json=IDEA
        )

        assert response.status_code == 502
        detail = response.json()["detail"]
        assert detail["success"] is False
        assert detail["reason"] == "invalid_output"

    def test_error_body_nests_envelope_under_detail(self, client_with):
        response = client_with(groq=_groq("not json")).post("/v1/engine/clarity", json=IDEA)

        body = response.json()
        assert set(body) == {"detail"}
        assert set(body["detail"]) == {"success", "error", "reason"}
        assert body["detail"]["error"].startswith("Clarity generation failed")

    def test_providers_down_is_503(self, client_with):
        response = client_with(groq=_groq(ProviderError("groq", "503"))).post(
            "/v1/engine/clarity", json=IDEA
        )

        assert response.status_code == 503
        assert response.json()["detail"]["reason"] == "providers_unavailable"

    def test_not_configured_is_500(self, client_with):
        response = client_with().post("/v1/engine/clarity", json=IDEA)

        assert response.status_code == 500
        assert response.json()["detail"]["reason"] == "not_configured"

    def test_idea_too_short_is_422(self, client_with):
        response = client_with(groq=_groq(as_json(CLARITY))).post(
            "/v1/engine/clarity", json={"idea": "app"}
        )
        assert response.status_code == 422

    def test_refine(self, client_with):
        groq = _groq(as_json(CLARITY))
        response = client_with(groq=groq).post(
            "/v1/engine/clarity/refine", json={"previous": CLARITY, "feedback": "Narrow the user"}
        )

        assert response.status_code == 200
        assert "Narrow the user" in groq.calls[0][0]


class TestResearchAndBlueprint:
    def test_quick_research(self, client_with):
        groq = _groq(as_json(RESEARCH))
        response = client_with(groq=groq).post(
            "/v1/engine/research", json={"clarity": CLARITY, "quick": True}
        )

        assert response.status_code == 200
        assert response.json()["data"]["painMap"][0]["intensity"] == "high"

    def test_full_research_without_firecrawl(self, client_with):
        groq = _groq(as_json(RESEARCH))
        response = client_with(groq=groq).post(
            "/v1/engine/research", json={"clarity": CLARITY, "additionalContext": "B2B only"}
        )

        assert response.status_code == 200
        assert "B2B only" in groq.calls[0][0]

    def test_blueprint(self, client_with):
        response = client_with(groq=_groq(as_json(BLUEPRINT))).post(
            "/v1/engine/blueprint", json={"clarity": CLARITY, "research": RESEARCH}
        )

        assert response.status_code == 200
        assert response.json()["data"]["features"][0]["priority"] == "must-have"


class TestOrchestratedResearch:
    def test_market_research(self, client_with):
        perplexity = ScriptedAdapter(Provider.PERPLEXITY, ["cited answer"])
        response = client_with(perplexity=perplexity, groq=_groq("unused")).post(
            "/v1/engine/research/market",
            json={"problemSpace": "invoicing", "targetAudience": "designers"},
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["provider"] == "perplexity"
        assert data["content"] == "cited answer"

    def test_validation_both_providers_down_is_503(self, client_with):
        perplexity = ScriptedAdapter(Provider.PERPLEXITY, [ProviderError("perplexity", "down")])
        response = client_with(
            perplexity=perplexity, groq=_groq(ProviderError("groq", "down"))
        ).post("/v1/engine/research/validation", json={"problemStatement": "Late payments"})

        assert response.status_code == 503
        assert "Problem validation failed" in response.json()["detail"]["error"]

    def test_competitors_require_urls(self, client_with):
        response = client_with(groq=_groq("x")).post(
            "/v1/engine/research/competitors", json={"urls": []}
        )
        assert response.status_code == 422

    def test_competitors(self, client_with):
        perplexity = ScriptedAdapter(Provider.PERPLEXITY, ["analysis"])
        response = client_with(perplexity=perplexity, groq=_groq("x")).post(
            "/v1/engine/research/competitors", json={"urls": ["https://acme.com"]}
        )

        assert response.status_code == 200
        assert "https://acme.com/" in perplexity.calls[0][0]


class TestProviderEndpoints:
    def test_health(self, client_with):
        claude = ScriptedAdapter(Provider.CLAUDE, ["4"])
        response = client_with(claude=claude, groq=_groq(ProviderError("groq", "down"))).get(
            "/v1/engine/providers/health"
        )

        assert response.status_code == 200
        assert response.json() == {"perplexity": False, "claude": True, "groq": False}

    def test_health_survives_adapter_raising_unwrapped_error(self, client_with):
        response = client_with(
            claude=ScriptedAdapter(Provider.CLAUDE, ["4"]), groq=BareAdapter(RuntimeError("boom"))
        ).get("/v1/engine/providers/health")

        assert response.status_code == 200
        assert response.json() == {"perplexity": False, "claude": True, "groq": False}

    def test_cost_estimate(self, client_with):
        response = client_with().post(
            "/v1/engine/cost-estimate", json={"task": "research", "tokens": 1_000_000}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["provider"] == "perplexity"
        assert body["estimatedCostUsd"] == pytest.approx(5.0)

    def test_cost_estimate_unknown_task(self, client_with):
        response = client_with().post(
            "/v1/engine/cost-estimate", json={"task": "brainstorm", "tokens": 10}
        )
        assert response.status_code == 422


class TestDecisionEndpoints:
    def test_refine(self, client_with):
        claude = ScriptedAdapter(Provider.CLAUDE, ['{"text": "Sharper insight"}'])
        response = client_with(claude=claude, groq=_groq("unused")).post(
            "/v1/engine/decisions/refine",
            json={
                "decisionType": "insight",
                "originalContent": {"text": "Users want it easier"},
                "userRequest": "Make it specific",
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"] == {
            "refinedContent": {"text": "Sharper insight"},
            "aiProvider": "claude",
        }

    def test_refine_unknown_decision_type_is_422(self, client_with):
        response = client_with(claude=ScriptedAdapter(Provider.CLAUDE), groq=_groq("x")).post(
            "/v1/engine/decisions/refine",
            json={"decisionType": "roadmap", "originalContent": {"a": 1}, "userRequest": "x"},
        )
        assert response.status_code == 422

    def test_refine_unparseable_is_502(self, client_with):
        claude = ScriptedAdapter(Provider.CLAUDE, ["I'd rather not."])
        response = client_with(claude=claude, groq=_groq("unused")).post(
            "/v1/engine/decisions/refine",
            json={"decisionType": "insight", "originalContent": {"text": "a"}, "userRequest": "b"},
        )

        assert response.status_code == 502
        assert response.json()["detail"]["reason"] == "invalid_output"

    def test_refine_providers_down_is_503(self, client_with):
        claude = ScriptedAdapter(Provider.CLAUDE, [ProviderError("claude", "down")])
        response = client_with(claude=claude, groq=_groq(ProviderError("groq", "down"))).post(
            "/v1/engine/decisions/refine",
            json={"decisionType": "persona", "originalContent": {"name": "M"}, "userRequest": "b"},
        )

        assert response.status_code == 503
        assert response.json()["detail"]["error"].startswith("Refinement failed")

    def test_alternatives(self, client_with):
        alternatives = [{"description": f"pain {i}"} for i in range(3)]
        claude = ScriptedAdapter(Provider.CLAUDE, [json.dumps(alternatives)])
        response = client_with(claude=claude, groq=_groq("unused")).post(
            "/v1/engine/decisions/alternatives",
            json={
                "decisionType": "painPoint",
                "currentContent": RESEARCH["painMap"][0],
                "alternativeType": "broader",
                "context": {"targetUser": "Freelance designers"},
            },
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["alternatives"] == alternatives
        assert data["aiProvider"] == "claude"
        assert "Target User: Freelance designers" in claude.calls[0][0]

    def test_alternatives_wrong_count_is_502(self, client_with):
        claude = ScriptedAdapter(Provider.CLAUDE, ['[{"text": "only one"}]'])
        response = client_with(claude=claude, groq=_groq("unused")).post(
            "/v1/engine/decisions/alternatives",
            json={"decisionType": "insight", "currentContent": {"text": "a"}},
        )

        assert response.status_code == 502

    def test_alternatives_for_competitor_gap_is_422(self, client_with):
        response = client_with(claude=ScriptedAdapter(Provider.CLAUDE), groq=_groq("x")).post(
            "/v1/engine/decisions/alternatives",
            json={"decisionType": "competitorGap", "currentContent": {"competitor": "Excel"}},
        )
        assert response.status_code == 422
