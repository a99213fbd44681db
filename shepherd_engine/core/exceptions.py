"""Error taxonomy for the orchestration core and domain generators."""

from typing import Literal


class EngineError(Exception):
    """Base class for every error raised by Shepherd Engine."""


class ConfigurationError(EngineError):
    """A provider credential is missing or malformed.

    Fatal at first use. The orchestrator never falls back on this error.
    """


class ProviderError(EngineError):
    """A single provider call failed (network, non-2xx status, empty response)."""

    def __init__(self, provider: str, message: str):
        self.provider = provider
        self.message = message
        super().__init__(f"{provider}: {message}")


class ProviderTimeoutError(ProviderError):
    """A provider call was aborted because its timer fired."""

    def __init__(self, provider: str, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(provider, f"request timed out after {timeout_ms}ms")


class OrchestrationError(EngineError):
    """Both the primary and the fallback provider failed for a task."""

    def __init__(self, task: str, attempts: list[ProviderError]):
        self.task = task
        self.attempts = attempts
        super().__init__(f"All AI providers failed for task: {task}")

    @property
    def timed_out(self) -> bool:
        """True when every attempt was aborted by its timer."""
        return bool(self.attempts) and all(
            isinstance(a, ProviderTimeoutError) for a in self.attempts
        )


class OutputValidationError(EngineError):
    """A completion was not valid JSON or did not satisfy the output shape."""

    def __init__(self, model: str, message: str):
        self.model = model
        self.message = message
        super().__init__(f"{model}: {message}")


GenerationFailureReason = Literal["providers_unavailable", "invalid_output"]


class GenerationError(EngineError):
    """A domain generator exhausted its model fallback list."""

    def __init__(self, generator: str, attempts: list[EngineError]):
        self.generator = generator
        self.attempts = attempts
        detail = "; ".join(str(a) for a in attempts) or "no models attempted"
        super().__init__(f"{generator} generation failed after {len(attempts)} attempts: {detail}")

    @property
    def reason(self) -> GenerationFailureReason:
        """Whether the models were unreachable or answered with unusable output."""
        if any(isinstance(a, OutputValidationError) for a in self.attempts):
            return "invalid_output"
        return "providers_unavailable"
