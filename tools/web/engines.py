"""
Web search engines.

Each engine answers ``await engine.search(query, max_results)`` with raw
SearchResult rows. Engines may raise; the aggregator isolates failures.
"""

import asyncio
from abc import ABC, abstractmethod

import httpx
from ddgs import DDGS

from utils.logger import get_logger

from .contracts import SearchResult

logger = get_logger(__name__)

BRAVE_SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"


class WebSearchEngine(ABC):
    name: str = "engine"

    @abstractmethod
    async def search(self, query: str, max_results: int = 10) -> list[SearchResult]:
        """Return raw rows for ``query``."""


class DuckDuckGoEngine(WebSearchEngine):
    """DuckDuckGo through the ``ddgs`` package; no API key needed."""

    name = "duckduckgo"

    def __init__(self, backend: str = "api", region: str | None = None, safesearch: str = "moderate"):
        self.backend = backend
        self.region = region
        self.safesearch = safesearch

    def _search_sync(self, query: str, max_results: int) -> list[SearchResult]:
        options = {"max_results": max_results, "backend": self.backend, "safesearch": self.safesearch}
        if self.region:
            options["region"] = self.region

        with DDGS() as ddg:
            rows = list(ddg.text(query, **options))

        results = []
        for row in rows:
            url = row.get("href") or row.get("link") or ""
            if not url:
                continue
            results.append(
                SearchResult(
                    title=row.get("title") or "",
                    url=url,
                    snippet=row.get("body") or "",
                    engine=self.name,
                )
            )
        return results

    async def search(self, query: str, max_results: int = 10) -> list[SearchResult]:
        return await asyncio.to_thread(self._search_sync, query, max_results)


class BraveEngine(WebSearchEngine):
    name = "brave"

    def __init__(
        self,
        api_key: str,
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise ValueError("BRAVE_API_KEY is required for Brave search")
        self.api_key = api_key
        self.timeout_s = timeout_s
        self._transport = transport

    async def search(self, query: str, max_results: int = 10) -> list[SearchResult]:
        headers = {"X-Subscription-Token": self.api_key, "Accept": "application/json"}
        params = {"q": query, "count": max(1, min(max_results, 20))}

        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
            response = await client.get(BRAVE_SEARCH_URL, params=params, headers=headers)
            response.raise_for_status()
            payload = response.json() if response.content else {}

        rows = ((payload or {}).get("web") or {}).get("results") or []
        return [
            SearchResult(
                title=row.get("title") or "",
                url=row["url"],
                snippet=row.get("description") or "",
                engine=self.name,
            )
            for row in rows
            if row.get("url")
        ]


class TavilyEngine(WebSearchEngine):
    """Tavily search API via the ``tavily-python`` SDK."""

    name = "tavily"

    def __init__(self, api_key: str, search_depth: str = "basic"):
        if not api_key:
            raise ValueError("TAVILY_API_KEY is required for Tavily search")

        # Lazy import so the module loads without tavily unless the engine is enabled
        try:
            from tavily import TavilyClient
        except ModuleNotFoundError as e:
            raise ModuleNotFoundError(
                "Optional dependency 'tavily' is not installed. "
                "Install it to enable the Tavily engine: pip install tavily-python"
            ) from e

        self.client = TavilyClient(api_key=api_key)
        self.search_depth = search_depth

    def _search_sync(self, query: str, max_results: int) -> list[SearchResult]:
        response = self.client.search(
            query=query,
            max_results=max_results,
            search_depth=self.search_depth,
            include_raw_content=False,
            include_answer=False,
        )
        return [
            SearchResult(
                title=row.get("title") or "",
                url=row["url"],
                snippet=row.get("content") or "",
                engine=self.name,
            )
            for row in response.get("results", [])
            if row.get("url")
        ]

    async def search(self, query: str, max_results: int = 10) -> list[SearchResult]:
        return await asyncio.to_thread(self._search_sync, query, max_results)
