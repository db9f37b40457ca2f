from pathlib import Path

import pytest

from fakes import FakeArchiveAdapter, archive_record
from models.source import SourceType
from tools.archive.adapters import CatalogArchiveAdapter, load_catalog_adapters
from tools.archive.archival_search import ArchivalSearchService
from utils.source_classifier import classify_type


def _adapters(rows_per_family=5, term="paperclip"):
    return {
        family: FakeArchiveAdapter(
            family,
            [archive_record(f"{family.upper()} {term} file {i}", url=f"https://{family}.gov/{i}") for i in range(rows_per_family)],
        )
        for family in ("cia", "fbi", "nara", "nsa")
    }


def test_budget_is_split_evenly_across_sources():
    adapters = _adapters()
    service = ArchivalSearchService(adapters)

    results = service.search(["cia", "fbi", "nara", "nsa"], 10, "Paperclip")

    # 10 // 4 == 2 per family
    assert len(results) == 8
    for family in ("cia", "fbi", "nara", "nsa"):
        assert sum(1 for s in results if s.type.value == family) == 2
        assert adapters[family].calls == [("Paperclip", 2)]


def test_results_keep_request_order_and_ids():
    service = ArchivalSearchService(_adapters())

    results = service.search(["nsa", "cia"], 4, "paperclip")

    assert [s.id for s in results] == ["nsa-1", "nsa-2", "cia-1", "cia-2"]
    assert results[0].type == SourceType.NSA


def test_relevance_gate_drops_non_matching_rows():
    adapter = FakeArchiveAdapter(
        "fbi",
        [
            archive_record("Unrelated file"),
            archive_record("Another", description="mentions MKULTRA in passing"),
        ],
    )
    service = ArchivalSearchService({"fbi": adapter})

    results = service.search(["fbi"], 10, "mkultra")

    assert [s.title for s in results] == ["Another"]


def test_failing_adapter_contributes_nothing():
    adapters = _adapters()
    adapters["cia"] = FakeArchiveAdapter("cia", error=ConnectionError("reading room down"))
    service = ArchivalSearchService(adapters)

    results = service.search(["cia", "fbi"], 10, "paperclip")

    assert {s.type for s in results} == {SourceType.FBI}
    assert len(results) == 5


def test_zero_cap_and_unknown_families_are_skipped():
    adapters = _adapters()
    service = ArchivalSearchService(adapters)

    # 3 // 4 == 0: no adapter is called
    assert service.search(["cia", "fbi", "nara", "nsa"], 3, "paperclip") == []
    assert all(a.calls == [] for a in adapters.values())

    assert service.search(["web", "wayback"], 10, "paperclip") == []
    assert service.search([], 10, "paperclip") == []


def test_catalog_adapter_filters_by_query():
    adapter = CatalogArchiveAdapter(
        "cia",
        [archive_record("Project MKUltra - Subproject Documentation"), archive_record("Operation Paperclip")],
    )
    assert [r.title for r in adapter.query("mkultra", 5)] == ["Project MKUltra - Subproject Documentation"]
    assert adapter.query("mkultra", 0) == []


def test_shipped_catalog_loads_all_archive_families():
    catalog = Path(__file__).resolve().parent.parent / "config" / "archive_catalog.yaml"
    adapters = load_catalog_adapters(catalog)

    assert set(adapters) == {"cia", "fbi", "nara", "nsa"}
    hits = ArchivalSearchService(adapters).search(["cia"], 12, "MKUltra")
    assert len(hits) == 1
    assert hits[0].declassified_date == "1977"
    assert hits[0].to_dict()["documentDate"] == "1953-1973"
    assert hits[0].type == classify_type(hits[0].url)


def test_missing_catalog_raises(tmp_path):
    with pytest.raises(ValueError):
        load_catalog_adapters(tmp_path / "missing.yaml")


def test_catalog_record_filed_under_the_wrong_family_is_rejected(tmp_path):
    catalog = tmp_path / "catalog.yaml"
    catalog.write_text(
        "archives:\n"
        "  nsa:\n"
        "    records:\n"
        "      - {title: Venona, url: 'https://vault.fbi.gov/venona'}\n",
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="classifies as fbi"):
        load_catalog_adapters(catalog)
