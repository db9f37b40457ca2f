import asyncio
from datetime import date

import httpx

from fakes import FakeCDXClient
from models.source import SourceType
from tools.archive.snapshot_search import (
    SnapshotSearchService,
    format_timestamp,
    title_from_url,
    years_before,
)
from tools.archive.wayback_client import WaybackCDXClient, parse_cdx_body
from utils.source_classifier import classify_type


def _service(client, domains=("cia.gov", "fbi.gov")):
    return SnapshotSearchService(client=client, domains=domains, today=lambda: date(2024, 3, 15))


def test_each_domain_queried_with_pattern_and_date_range():
    client = FakeCDXClient()

    asyncio.run(_service(client).search("ufo", years_back=25, max_results=4))

    assert sorted(client.calls) == [
        ("*.cia.gov/*ufo*", "19990315", "20240315", 4),
        ("*.fbi.gov/*ufo*", "19990315", "20240315", 4),
    ]


def test_records_become_snapshot_sources():
    client = FakeCDXClient(
        by_domain={
            "cia.gov": [("20010911123000", "https://www.cia.gov/library/reports/ufo-study_1997.pdf")],
        }
    )

    results = asyncio.run(_service(client).search("ufo", years_back=25, max_results=4))

    assert len(results) == 1
    source = results[0]
    assert source.id == "wayback-cia.gov-1"
    # the classifier sees cia.gov inside the snapshot URL
    assert source.type == SourceType.CIA
    assert source.url == "https://web.archive.org/web/20010911123000/https://www.cia.gov/library/reports/ufo-study_1997.pdf"
    assert source.title == "Ufo Study 1997"
    assert source.description == "Archived version of cia.gov page from 2001-09-11"
    assert source.snippet == 'Historical snapshot of government document or webpage related to "ufo"'


def test_snapshot_types_always_match_the_classifier():
    client = FakeCDXClient(
        by_domain={
            "cia.gov": [("20010101000000", "https://www.cia.gov/readingroom/x.pdf")],
            "archives.gov": [("20050101000000", "https://www.archives.gov/research/jfk")],
            "whitehouse.gov": [("19990101000000", "https://www.whitehouse.gov/ufo-briefing")],
        }
    )
    service = _service(client, domains=("cia.gov", "archives.gov", "whitehouse.gov"))

    results = asyncio.run(service.search("x", years_back=30, max_results=10))

    assert [s.type for s in results] == [SourceType.CIA, SourceType.NARA, SourceType.WAYBACK]
    assert all(s.type == classify_type(s.url) for s in results)


def test_failed_domain_contributes_nothing_and_order_is_domain_order():
    client = FakeCDXClient(
        by_domain={
            "cia.gov": [("20000101000000", "https://www.cia.gov/a")],
            "fbi.gov": [("20000101000000", "https://www.fbi.gov/b"), ("20000102000000", "https://www.fbi.gov/c")],
            "nsa.gov": [("20000101000000", "https://www.nsa.gov/d")],
        },
        failing={"cia.gov"},
    )

    results = asyncio.run(_service(client, ("cia.gov", "fbi.gov", "nsa.gov")).search("x", 10, 2))

    assert [s.id for s in results] == ["wayback-fbi.gov-1", "wayback-fbi.gov-2"]


def test_zero_budget_makes_no_calls():
    client = FakeCDXClient()
    assert asyncio.run(_service(client).search("x", 10, 0)) == []
    assert client.calls == []


def test_title_and_timestamp_helpers():
    assert title_from_url("https://www.fbi.gov/") == "Archived www.fbi.gov Document"
    assert title_from_url("https://www.state.gov/cold%20war-files/") == "Cold War Files"
    assert format_timestamp("2001") == "2001"
    assert years_before(date(2024, 2, 29), 1) == date(2023, 2, 28)


def test_parse_cdx_json_with_header():
    body = '[["urlkey","timestamp","original","mimetype"],["gov,cia)/x","20050101000000","https://www.cia.gov/x","text/html"]]'
    records = parse_cdx_body(body)
    assert [(r.timestamp, r.original) for r in records] == [("20050101000000", "https://www.cia.gov/x")]
    assert parse_cdx_body("") == []
    assert parse_cdx_body("[]") == []


def test_parse_cdx_plain_text_lines():
    body = "gov,fbi)/a 20100101000000 https://www.fbi.gov/a text/html 200\n"
    assert parse_cdx_body(body)[0].original == "https://www.fbi.gov/a"


def test_cdx_client_sends_expected_params():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(dict(request.url.params))
        return httpx.Response(200, text='[["urlkey","timestamp","original"],["k","20200101000000","https://www.nsa.gov/y"]]')

    client = WaybackCDXClient(transport=httpx.MockTransport(handler))
    records = asyncio.run(client.query("*.nsa.gov/*venona*", "20000101", "20240101", 3))

    assert records[0].original == "https://www.nsa.gov/y"
    assert seen == {
        "url": "*.nsa.gov/*venona*",
        "from": "20000101",
        "to": "20240101",
        "output": "json",
        "collapse": "urlkey",
        "limit": "3",
    }
