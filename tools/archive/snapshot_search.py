"""
SnapshotSearchService - historical captures of government sites.

Queries the Wayback CDX index for every target domain at once and turns
each capture into a Source typed by the URL classifier (a snapshot of a
cia.gov page is ``cia``; other government captures fall to ``wayback``).
"""

import asyncio
import re
from collections.abc import Callable, Sequence
from datetime import date
from urllib.parse import unquote, urlparse

from models.source import Source
from utils.logger import get_logger
from utils.source_classifier import classify_type

from .wayback_client import CDXRecord, WaybackCDXClient

logger = get_logger(__name__)

DEFAULT_SNAPSHOT_DOMAINS = (
    "cia.gov",
    "fbi.gov",
    "archives.gov",
    "nsa.gov",
    "whitehouse.gov",
    "defense.gov",
    "state.gov",
)

_EXTENSION = re.compile(r"\.[^.]+$")
_WORD_START = re.compile(r"\b\w")


def years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return day.replace(year=day.year - years, day=28)


def format_timestamp(timestamp: str) -> str:
    """``20200115123000`` -> ``2020-01-15``; anything not 14 chars is returned unchanged."""
    if len(timestamp) != 14:
        return timestamp
    return f"{timestamp[0:4]}-{timestamp[4:6]}-{timestamp[6:8]}"


def title_from_url(url: str) -> str:
    try:
        parsed = urlparse(url)
        segments = [s for s in parsed.path.split("/") if s]
        if segments:
            title = _EXTENSION.sub("", unquote(segments[-1]))
            title = title.replace("-", " ").replace("_", " ")
            return _WORD_START.sub(lambda m: m.group(0).upper(), title)
        if not parsed.hostname:
            return "Archived Government Document"
        return f"Archived {parsed.hostname} Document"
    except ValueError:
        return "Archived Government Document"


class SnapshotSearchService:
    def __init__(
        self,
        client: WaybackCDXClient | None = None,
        domains: Sequence[str] = DEFAULT_SNAPSHOT_DOMAINS,
        today: Callable[[], date] = date.today,
    ):
        self.client = client or WaybackCDXClient()
        self.domains = list(domains)
        self._today = today

    async def search(self, query: str, years_back: int, max_results: int) -> list[Source]:
        if max_results <= 0 or not self.domains:
            return []

        end = self._today()
        start = years_before(end, years_back)
        from_date, to_date = start.strftime("%Y%m%d"), end.strftime("%Y%m%d")

        per_domain = await asyncio.gather(
            *[self._search_domain(domain, query, from_date, to_date, max_results) for domain in self.domains]
        )

        results = [source for domain_results in per_domain for source in domain_results]
        logger.info(
            "Snapshot search complete",
            extra={
                "extra_fields": {
                    "query": query,
                    "from": from_date,
                    "to": to_date,
                    "results": len(results),
                }
            },
        )
        return results[:max_results]

    async def _search_domain(
        self, domain: str, query: str, from_date: str, to_date: str, limit: int
    ) -> list[Source]:
        try:
            records = await self.client.query(f"*.{domain}/*{query}*", from_date, to_date, limit)
        except Exception as e:
            logger.warning(
                f"Snapshot search failed for {domain}",
                extra={"extra_fields": {"domain": domain, "error": str(e), "error_type": type(e).__name__}},
            )
            return []

        return [self._to_source(domain, index, record, query) for index, record in enumerate(records[:limit], start=1)]

    @staticmethod
    def _to_source(domain: str, index: int, record: CDXRecord, query: str) -> Source:
        url = f"https://web.archive.org/web/{record.timestamp}/{record.original}"
        return Source(
            id=f"wayback-{domain}-{index}",
            title=title_from_url(record.original),
            url=url,
            type=classify_type(url),
            description=f"Archived version of {domain} page from {format_timestamp(record.timestamp)}",
            snippet=f'Historical snapshot of government document or webpage related to "{query}"',
        )
