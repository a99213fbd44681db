"""Perplexity service for real-time web research with citations."""

from typing import Any

import httpx

from shepherd_engine.core.exceptions import ConfigurationError, ProviderError
from shepherd_engine.core.logging import get_logger
from shepherd_engine.core.provider_base import ProviderAdapter
from shepherd_engine.core.schemas_orchestration import (
    CallOptions,
    CallResult,
    PerplexityOptions,
    Provider,
    TokenUsage,
)

logger = get_logger(__name__)

PERPLEXITY_BASE_URL = "https://api.perplexity.ai"

DEFAULT_RESEARCH_TEMPERATURE = 0.2


class PerplexityAdapter(ProviderAdapter):
    """Web-research provider. Issues one raw HTTPS POST per call."""

    provider = Provider.PERPLEXITY

    def __init__(
        self,
        api_key: str,
        default_model: str = "sonar-deep-research",
        http_client: httpx.AsyncClient | None = None,
    ):
        if not api_key:
            raise ConfigurationError("PERPLEXITY_API_KEY not configured")
        super().__init__(default_model)
        self._api_key = api_key
        self._http_client = http_client

    def build_request_body(self, prompt: str, options: CallOptions) -> dict[str, Any]:
        """Build the chat/completions body, including search filters."""
        search = options.perplexity or PerplexityOptions()

        messages = []
        if options.system_prompt:
            messages.append({"role": "system", "content": options.system_prompt})
        messages.append({"role": "user", "content": prompt})

        body: dict[str, Any] = {
            "model": search.model or self._model_for(options),
            "messages": messages,
            "temperature": (
                options.temperature
                if options.temperature is not None
                else DEFAULT_RESEARCH_TEMPERATURE
            ),
            "return_citations": True,
        }
        if options.max_tokens:
            body["max_tokens"] = options.max_tokens
        if search.search_domain_filter:
            body["search_domain_filter"] = search.search_domain_filter
        if search.search_recency:
            body["search_recency_filter"] = search.search_recency
        if search.search_academic:
            body["search_academic"] = True
        if search.reasoning_effort:
            body["reasoning_effort"] = search.reasoning_effort
        return body

    async def _complete(self, prompt: str, options: CallOptions) -> CallResult:
        body = self.build_request_body(prompt, options)
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        if self._http_client is not None:
            response = await self._http_client.post(
                f"{PERPLEXITY_BASE_URL}/chat/completions", headers=headers, json=body
            )
        else:
            # The adapter's own timer bounds the call, not httpx
            async with httpx.AsyncClient(timeout=httpx.Timeout(None)) as client:
                response = await client.post(
                    f"{PERPLEXITY_BASE_URL}/chat/completions", headers=headers, json=body
                )

        if response.status_code >= 400:
            raise ProviderError(
                self.provider.value,
                f"Perplexity API error ({response.status_code}): {response.text[:500]}",
            )

        data = response.json()
        choices = data.get("choices") or []
        content = choices[0].get("message", {}).get("content") if choices else None
        if not content:
            raise ProviderError(self.provider.value, "No content in Perplexity response")

        usage = data.get("usage") or {}
        citations = data.get("citations")

        logger.info(
            f"Perplexity research complete: {len(content)} chars, "
            f"{len(citations or [])} citations"
        )

        return CallResult(
            content=content,
            provider=self.provider,
            model=data.get("model") or body["model"],
            citations=citations,
            usage=TokenUsage(
                prompt_tokens=usage.get("prompt_tokens", 0),
                completion_tokens=usage.get("completion_tokens", 0),
                total_tokens=usage.get("total_tokens", 0),
            ),
        )


# =============================================================================
# Research prompts (run through the orchestrator's research/validation tasks)
# =============================================================================


def competitor_research_request(urls: list[str]) -> tuple[str, PerplexityOptions]:
    """Prompt and search options for analysing a list of competitor sites."""
    prompt = f"""Analyze these competitors: {', '.join(urls)}

For each competitor:
1. Core value proposition
2. Target audience demographics
3. Key features and differentiators
4. Pricing model and tiers
5. User pain points they solve
6. Weaknesses or gaps in their solution

Then synthesize:
- Competitive landscape overview
- Opportunities for differentiation
- Market gaps to exploit
- User needs not being met

Provide specific, actionable insights with citations."""
    options = PerplexityOptions(
        model="sonar-pro",
        search_domain_filter=list(urls),
        reasoning_effort="high",
        search_recency="month",
    )
    return prompt, options


def market_research_request(
    problem_space: str, target_audience: str
) -> tuple[str, PerplexityOptions]:
    """Prompt and search options for sizing a market."""
    prompt = f"""Research the market for: {problem_space}

Target audience: {target_audience}

Provide:
1. Market size and growth trends (cite recent reports)
2. Key user personas in this space
3. Common pain points from user forums, Reddit, reviews
4. Existing solutions and their limitations
5. Emerging trends and opportunities
6. User behavior patterns

Focus on data from the last 3 months. Include citations for all statistics."""
    options = PerplexityOptions(
        model="sonar-pro", reasoning_effort="medium", search_recency="month"
    )
    return prompt, options


def problem_validation_request(problem_statement: str) -> tuple[str, PerplexityOptions]:
    """Prompt and search options for validating that a problem is real."""
    prompt = f"""Validate this problem space: "{problem_statement}"

Research:
1. Evidence this problem exists (user complaints, forum discussions, Reddit threads)
2. Size of the affected audience
3. Current workarounds people use
4. Willingness to pay for solutions (pricing research, competitor pricing)
5. Failed solutions and why they failed

Provide evidence-based validation with specific examples and citations."""
    options = PerplexityOptions(
        model="sonar-pro", reasoning_effort="medium", search_recency="month"
    )
    return prompt, options
