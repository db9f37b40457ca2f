"""
WebSearchAggregator - merges general web search engines into ranked Sources.

All engines are queried concurrently; each runs under its own timeout and a
failing engine simply contributes no rows. Rows are de-duplicated on a
canonical URL key (first seen wins), scored, stably sorted and truncated.
"""

import asyncio
from collections.abc import Sequence

from models.source import Source
from utils.logger import get_logger
from utils.source_classifier import classify_type

from .cache import InMemoryTTLCache
from .contracts import ScoredResult, SearchResult
from .engines import WebSearchEngine
from .scoring import canonical_key, score_result

logger = get_logger(__name__)

DEFAULT_ENGINE_TIMEOUT_S = 10.0


class WebSearchAggregator:
    def __init__(
        self,
        engines: Sequence[WebSearchEngine],
        timeout_s: float = DEFAULT_ENGINE_TIMEOUT_S,
        cache: InMemoryTTLCache | None = None,
    ):
        self.engines = list(engines)
        self.timeout_s = timeout_s
        self.cache = cache

    async def search(self, query: str, max_results: int = 10) -> list[Source]:
        if max_results <= 0 or not self.engines:
            return []

        cache_key = ("web", query, max_results)
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug(f"Web search cache hit for '{query}'")
                return list(cached)

        per_engine = await asyncio.gather(*[self._safe_search(engine, query, max_results) for engine in self.engines])
        rows = [row for engine_rows in per_engine for row in engine_rows]

        unique = self.dedupe(rows)
        ranked = self.rank(unique, query)[:max_results]
        sources = [self._to_source(index, item.result) for index, item in enumerate(ranked, start=1)]

        logger.info(
            "Web search complete",
            extra={
                "extra_fields": {
                    "query": query,
                    "engines": [e.name for e in self.engines],
                    "raw": len(rows),
                    "unique": len(unique),
                    "returned": len(sources),
                }
            },
        )

        if self.cache is not None and sources:
            self.cache.set(cache_key, tuple(sources))
        return sources

    async def _safe_search(self, engine: WebSearchEngine, query: str, max_results: int) -> list[SearchResult]:
        try:
            return await asyncio.wait_for(engine.search(query, max_results), timeout=self.timeout_s)
        except asyncio.TimeoutError:
            logger.warning(f"Web engine {engine.name} timed out after {self.timeout_s}s")
        except Exception as e:
            logger.warning(
                f"Web engine {engine.name} failed",
                extra={"extra_fields": {"engine": engine.name, "error": str(e), "error_type": type(e).__name__}},
            )
        return []

    @staticmethod
    def dedupe(rows: Sequence[SearchResult]) -> list[SearchResult]:
        seen: set[str] = set()
        unique = []
        for row in rows:
            key = canonical_key(row.url)
            if not key:
                logger.warning(
                    "Dropping web result with unusable URL",
                    extra={"extra_fields": {"engine": row.engine, "url": row.url}},
                )
                continue
            if key in seen:
                continue
            seen.add(key)
            unique.append(row)
        return unique

    @staticmethod
    def rank(rows: Sequence[SearchResult], query: str) -> list[ScoredResult]:
        scored = [ScoredResult(result=row, score=score_result(row, query)) for row in rows]
        # sorted() is stable, so equal scores keep engine/row order
        return sorted(scored, key=lambda s: s.score, reverse=True)

    @staticmethod
    def _to_source(index: int, row: SearchResult) -> Source:
        return Source(
            id=f"web-{index}",
            title=row.title,
            url=row.url,
            type=classify_type(row.url),
            description=row.snippet,
            snippet=row.snippet,
        )
