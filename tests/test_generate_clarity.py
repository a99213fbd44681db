"""Tests for clarity generation and the same-provider model fallback loop."""

import pytest

from shepherd_engine.chains._model_fallback import MODEL_FALLBACKS, generate_structured
from shepherd_engine.chains.generate_clarity import (
    SYSTEM_PROMPT,
    build_clarity_prompt,
    build_refine_prompt,
    generate_clarity,
    refine_clarity,
)
from shepherd_engine.core.exceptions import (
    ConfigurationError,
    GenerationError,
    OutputValidationError,
    ProviderError,
)
from shepherd_engine.core.schemas_clarity import ClarityInput, ClarityOutput
from shepherd_engine.core.schemas_orchestration import Provider
from tests.fakes.fake_providers import ScriptedAdapter, make_registry
from tests.fixtures_engine import CLARITY, as_json

IDEA = ClarityInput(idea="An app that helps freelance designers get paid on time")


def _models_tried(adapter: ScriptedAdapter) -> list[str]:
    return [options.model for _, options in adapter.calls]


class TestGenerateClarity:
    @pytest.mark.asyncio
    async def test_first_model_valid(self):
        groq = ScriptedAdapter(Provider.GROQ, [as_json(CLARITY)])

        clarity = await generate_clarity(IDEA, registry=make_registry(groq=groq), provider=Provider.GROQ)

        assert isinstance(clarity, ClarityOutput)
        assert clarity.target_user == CLARITY["targetUser"]
        assert _models_tried(groq) == ["llama-3.3-70b-versatile"]
        _, options = groq.calls[0]
        assert options.system_prompt == SYSTEM_PROMPT
        assert options.json_mode is True
        assert options.temperature == 0.4
        assert options.max_tokens == 2048

    @pytest.mark.asyncio
    async def test_invalid_output_advances_to_next_model(self):
        """Valid JSON with an empty required list is rejected, not returned."""
        groq = ScriptedAdapter(
            Provider.GROQ, [as_json(CLARITY, jobsToBeDone=[]), as_json(CLARITY)]
        )

        clarity = await generate_clarity(IDEA, registry=make_registry(groq=groq), provider=Provider.GROQ)

        assert clarity.jobs_to_be_done == CLARITY["jobsToBeDone"]
        assert _models_tried(groq) == MODEL_FALLBACKS[Provider.GROQ][:2]

    @pytest.mark.asyncio
    async def test_provider_error_advances_to_next_model(self):
        groq = ScriptedAdapter(
            Provider.GROQ,
            [ProviderError("groq", "model decommissioned"), "```json\n" + as_json(CLARITY) + "\n```"],
        )

        clarity = await generate_clarity(IDEA, registry=make_registry(groq=groq), provider=Provider.GROQ)

        assert clarity.problem_statement == CLARITY["problemStatement"]
        assert groq.call_count == 2

    @pytest.mark.asyncio
    async def test_all_models_invalid(self):
        groq = ScriptedAdapter(Provider.GROQ, ["I cannot help with that."])

        with pytest.raises(GenerationError) as exc:
            await generate_clarity(IDEA, registry=make_registry(groq=groq), provider=Provider.GROQ)

        assert exc.value.generator == "clarity"
        assert exc.value.reason == "invalid_output"
        assert len(exc.value.attempts) == len(MODEL_FALLBACKS[Provider.GROQ])
        assert all(isinstance(a, OutputValidationError) for a in exc.value.attempts)

    @pytest.mark.asyncio
    async def test_all_models_unreachable(self):
        claude = ScriptedAdapter(Provider.CLAUDE, [ProviderError("claude", "overloaded")])

        with pytest.raises(GenerationError) as exc:
            await generate_clarity(IDEA, registry=make_registry(claude=claude), provider=Provider.CLAUDE)

        assert exc.value.reason == "providers_unavailable"
        assert _models_tried(claude) == MODEL_FALLBACKS[Provider.CLAUDE]

    @pytest.mark.asyncio
    async def test_unconfigured_provider(self):
        with pytest.raises(ConfigurationError):
            await generate_clarity(IDEA, registry=make_registry(), provider=Provider.GROQ)


class TestRefineClarity:
    @pytest.mark.asyncio
    async def test_refine_sends_previous_and_feedback(self):
        previous = ClarityOutput.model_validate(CLARITY)
        refined = as_json(CLARITY, targetUser="Agency-averse illustrators with recurring clients")
        groq = ScriptedAdapter(Provider.GROQ, [refined])

        result = await refine_clarity(
            previous, "Focus on illustrators", registry=make_registry(groq=groq), provider=Provider.GROQ
        )

        assert result.target_user.startswith("Agency-averse illustrators")
        prompt, options = groq.calls[0]
        assert "Focus on illustrators" in prompt
        assert '"problemStatement"' in prompt
        assert options.temperature == 0.3


class TestPrompts:
    def test_clarity_prompt_includes_optional_sections(self):
        prompt = build_clarity_prompt(
            ClarityInput(
                idea="An app that helps freelance designers get paid",
                target_user="Freelance designers",
                additional_context="Bootstrapped",
            )
        )

        assert "## Target User (provided by founder)" in prompt
        assert "## Additional Context\nBootstrapped" in prompt
        assert '"nextSteps"' in prompt

    def test_clarity_prompt_omits_missing_sections(self):
        prompt = build_clarity_prompt(IDEA)
        assert "## Target User" not in prompt
        assert "## Additional Context" not in prompt

    def test_refine_prompt_uses_camel_case(self):
        prompt = build_refine_prompt(ClarityOutput.model_validate(CLARITY), "shorter")
        assert '"jobsToBeDone"' in prompt


class TestGenerateStructured:
    @pytest.mark.asyncio
    async def test_explicit_model_list(self):
        groq = ScriptedAdapter(Provider.GROQ, [as_json(CLARITY)])

        await generate_structured(
            registry=make_registry(groq=groq),
            provider=Provider.GROQ,
            generator="test",
            system_prompt="s",
            user_prompt="u",
            output_model=ClarityOutput,
            temperature=0.0,
            max_tokens=100,
            models=["only-model"],
        )

        assert _models_tried(groq) == ["only-model"]

    @pytest.mark.asyncio
    async def test_non_object_json_is_invalid_output(self):
        groq = ScriptedAdapter(Provider.GROQ, ["[1, 2, 3]"])

        with pytest.raises(GenerationError) as exc:
            await generate_structured(
                registry=make_registry(groq=groq),
                provider=Provider.GROQ,
                generator="test",
                system_prompt="s",
                user_prompt="u",
                output_model=ClarityOutput,
                temperature=0.0,
                max_tokens=100,
                models=["m1"],
            )

        assert exc.value.reason == "invalid_output"
        assert "m1" in str(exc.value)
