from collections.abc import Iterable, Mapping

from models.source import ARCHIVE_SOURCE_TYPES, Source
from utils.logger import get_logger

from .adapters import ArchiveAdapter, ArchiveRecord

logger = get_logger(__name__)

ARCHIVE_FAMILIES = frozenset(t.value for t in ARCHIVE_SOURCE_TYPES)


class ArchivalSearchService:
    """
    Fans a query out to the enabled archive collections under a result budget.

    The budget is split evenly: each enabled family gets
    ``max_results // len(enabled_sources)`` rows, and the concatenation is
    truncated to ``max_results``.
    """

    def __init__(self, adapters: Mapping[str, ArchiveAdapter]):
        self.adapters = dict(adapters)

    def search(self, enabled_sources: Iterable[str], max_results: int, query: str) -> list[Source]:
        enabled = list(enabled_sources)
        if not enabled or max_results <= 0:
            return []

        per_source_cap = max_results // len(enabled)
        results: list[Source] = []

        for family in enabled:
            if family not in ARCHIVE_FAMILIES:
                continue
            adapter = self.adapters.get(family)
            if adapter is None:
                logger.debug(f"No adapter registered for {family}")
                continue
            if per_source_cap == 0:
                continue

            try:
                records = adapter.query(query, per_source_cap)
            except Exception as e:
                logger.warning(
                    f"Archive search failed for {family}",
                    extra={"extra_fields": {"family": family, "error": str(e), "error_type": type(e).__name__}},
                )
                continue

            kept = [r for r in records if r.matches(query)][:per_source_cap]
            results.extend(self._to_source(family, index, r) for index, r in enumerate(kept, start=1))

        logger.info(
            "Archival search complete",
            extra={"extra_fields": {"query": query, "families": enabled, "results": len(results)}},
        )
        return results[:max_results]

    @staticmethod
    def _to_source(family: str, index: int, record: ArchiveRecord) -> Source:
        return Source(
            id=f"{family}-{index}",
            title=record.title,
            url=record.url,
            type=family,
            description=record.description,
            document_date=record.document_date,
            declassified_date=record.declassified_date,
            pages=record.pages,
            snippet=record.snippet,
        )
