"""Pytest configuration and fixtures."""

import os

import pytest

# Set before any shepherd_engine import: loggers read settings at import time
os.environ["ENGINE_ENV"] = "test"
os.environ["PERPLEXITY_API_KEY"] = "pplx-test-key"
os.environ["ANTHROPIC_API_KEY"] = "sk-ant-test-key"
os.environ["GROQ_API_KEY"] = "gsk-test-key"
os.environ.pop("FIRECRAWL_API_KEY", None)


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Start the session from freshly loaded settings."""
    from shepherd_engine.core.config import get_settings
    from shepherd_engine.core.provider_registry import get_provider_registry

    get_settings.cache_clear()
    get_provider_registry.cache_clear()
    yield
    get_settings.cache_clear()
    get_provider_registry.cache_clear()
