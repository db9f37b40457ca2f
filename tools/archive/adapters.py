"""Archive adapters: one per declassified-document collection."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

import yaml

from models.source import SourceType
from utils.logger import get_logger
from utils.source_classifier import classify_type

logger = get_logger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent.parent / "config" / "archive_catalog.yaml"


@dataclass(frozen=True)
class ArchiveRecord:
    """A document row as returned by an archive adapter."""

    title: str
    url: str
    description: str = ""
    document_date: str | None = None
    declassified_date: str | None = None
    pages: str | None = None
    snippet: str | None = None

    def matches(self, search_term: str) -> bool:
        term = (search_term or "").lower()
        return term in self.title.lower() or term in self.description.lower()


class ArchiveAdapter(ABC):
    """Boundary to one archive collection (CIA reading room, FBI vault, ...)."""

    def __init__(self, family: SourceType | str, name: str | None = None):
        self.family = SourceType(family)
        self.name = name or self.family.value

    @abstractmethod
    def query(self, search_term: str, limit: int) -> list[ArchiveRecord]:
        """Return at most ``limit`` records for ``search_term``. May raise on transport failure."""


class CatalogArchiveAdapter(ArchiveAdapter):
    """
    Adapter backed by a fixed list of reference records.

    Used where a collection has no public search API; records come from
    ``config/archive_catalog.yaml``.
    """

    def __init__(self, family: SourceType | str, records: list[ArchiveRecord], name: str | None = None):
        super().__init__(family, name=name)
        self._records = list(records)

    def query(self, search_term: str, limit: int) -> list[ArchiveRecord]:
        if limit <= 0:
            return []
        hits = [record for record in self._records if record.matches(search_term)]
        return hits[:limit]


def _record_from_dict(data: dict) -> ArchiveRecord:
    if "title" not in data or "url" not in data:
        raise ValueError(f"Archive record missing title/url: {data}")

    def _opt(key: str) -> str | None:
        value = data.get(key)
        return None if value is None else str(value)

    return ArchiveRecord(
        title=str(data["title"]),
        url=str(data["url"]),
        description=str(data.get("description") or ""),
        document_date=_opt("document_date"),
        declassified_date=_opt("declassified_date"),
        pages=_opt("pages"),
        snippet=_opt("snippet"),
    )


def load_catalog_adapters(path: str | Path | None = None) -> dict[str, ArchiveAdapter]:
    """
    Build one CatalogArchiveAdapter per family listed in the catalog file.

    Returns:
        Mapping of family value ("cia", "fbi", ...) to adapter
    """
    catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH
    if not catalog_path.exists():
        raise ValueError(f"Archive catalog not found at {catalog_path}")

    data = yaml.safe_load(catalog_path.read_text(encoding="utf-8"))
    if not data or "archives" not in data:
        raise ValueError("Invalid archive catalog: missing archives")

    adapters: dict[str, ArchiveAdapter] = {}
    for family, entry in data["archives"].items():
        records = [_record_from_dict(r) for r in (entry or {}).get("records", [])]
        adapter = CatalogArchiveAdapter(family, records, name=(entry or {}).get("name"))
        for record in records:
            # archival Sources are typed by family, so the URL must classify the same way
            if classify_type(record.url) is not adapter.family:
                raise ValueError(
                    f"Invalid archive catalog: {record.url} is listed under {family} "
                    f"but classifies as {classify_type(record.url).value}"
                )
        adapters[adapter.family.value] = adapter

    logger.info(
        f"Loaded {len(adapters)} archive catalogs",
        extra={"extra_fields": {"path": str(catalog_path), "families": sorted(adapters)}},
    )
    return adapters
