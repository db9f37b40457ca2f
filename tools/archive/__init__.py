"""Declassified-archive and historical-snapshot search."""

from .adapters import ArchiveAdapter, ArchiveRecord, CatalogArchiveAdapter, load_catalog_adapters
from .archival_search import ArchivalSearchService
from .snapshot_search import SnapshotSearchService
from .wayback_client import CDXRecord, WaybackCDXClient

__all__ = [
    "ArchiveAdapter",
    "ArchiveRecord",
    "ArchivalSearchService",
    "CDXRecord",
    "CatalogArchiveAdapter",
    "SnapshotSearchService",
    "WaybackCDXClient",
    "load_catalog_adapters",
]
