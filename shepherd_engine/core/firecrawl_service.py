"""Firecrawl web search and page scraping for research gathering."""

from typing import Any

import httpx

from shepherd_engine.core.config import get_settings
from shepherd_engine.core.exceptions import ConfigurationError
from shepherd_engine.core.logging import get_logger

logger = get_logger(__name__)

FIRECRAWL_BASE_URL = "https://api.firecrawl.dev/v1"


async def _post(path: str, payload: dict[str, Any], timeout: int | None) -> dict[str, Any]:
    """POST to a Firecrawl endpoint and return the decoded body.

    Raises:
        ConfigurationError: If FIRECRAWL_API_KEY is not set
        httpx.HTTPError: On non-2xx status, timeout or network failure
        ValueError: If the body is not a JSON object
    """
    settings = get_settings()
    if not settings.FIRECRAWL_API_KEY:
        raise ConfigurationError("FIRECRAWL_API_KEY not configured")

    async with httpx.AsyncClient(timeout=timeout or settings.FIRECRAWL_TIMEOUT) as client:
        response = await client.post(
            f"{FIRECRAWL_BASE_URL}{path}",
            headers={"Authorization": f"Bearer {settings.FIRECRAWL_API_KEY}"},
            json=payload,
        )
    response.raise_for_status()
    body = response.json()
    if not isinstance(body, dict):
        raise ValueError(f"Expected a JSON object from Firecrawl, got {type(body).__name__}")
    return body


async def search_web(query: str, limit: int = 5, timeout: int | None = None) -> list[dict[str, str]]:
    """
    Run a Firecrawl web search.

    Returns:
        Up to `limit` hits as {url, title, description}
    """
    body = await _post("/search", {"query": query, "limit": limit}, timeout)
    items = body.get("data") or []
    if not isinstance(items, list):
        raise ValueError(f"Expected search data list, got {type(items).__name__}")

    hits = [
        {
            "url": item.get("url") or item.get("link", ""),
            "title": item.get("title", ""),
            "description": item.get("description") or item.get("snippet", ""),
        }
        for item in items[:limit]
        if isinstance(item, dict)
    ]
    logger.info(f"Firecrawl search '{query[:50]}': {len(hits)} results")
    return hits


async def scrape_website(url: str, timeout: int | None = None) -> dict[str, Any]:
    """
    Scrape the main content of one page as markdown.

    Returns:
        {markdown, metadata}
    """
    body = await _post(
        "/scrape",
        {"url": url, "formats": ["markdown"], "onlyMainContent": True},
        timeout,
    )

    page = body.get("data") or {}
    if not isinstance(page, dict):
        raise ValueError(f"Expected scrape data object, got {type(page).__name__}")
    markdown = page.get("markdown") or ""
    metadata = page.get("metadata") or {}
    logger.info(f"Scraped {url}: {len(markdown)} chars ({metadata.get('title', 'untitled')})")
    return {"markdown": markdown, "metadata": metadata}


def _describe_failure(error: Exception) -> str:
    if isinstance(error, ConfigurationError):
        return f"not configured ({error})"
    if isinstance(error, httpx.HTTPStatusError):
        return f"HTTP {error.response.status_code}"
    if isinstance(error, httpx.TimeoutException):
        return "timeout"
    return f"{type(error).__name__}: {error}"


async def search_web_safe(query: str, limit: int = 5) -> list[dict[str, str]]:
    """Like search_web, but an empty list on any failure. Research is best-effort."""
    try:
        return await search_web(query, limit)
    except (ConfigurationError, httpx.HTTPError, ValueError) as e:
        logger.warning(f"Firecrawl search skipped for '{query[:50]}': {_describe_failure(e)}")
        return []


async def scrape_website_safe(url: str, timeout: int | None = None) -> dict[str, Any] | None:
    """Like scrape_website, but None on any failure."""
    try:
        return await scrape_website(url, timeout)
    except (ConfigurationError, httpx.HTTPError, ValueError) as e:
        logger.warning(f"Firecrawl scrape skipped for {url}: {_describe_failure(e)}")
        return None
