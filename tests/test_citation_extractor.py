from models.source import SourceType
from utils.citation_extractor import (
    extract_sources,
    find_citation_markers,
    find_urls,
    resolve_citation,
)


def test_url_at_end_of_string():
    assert find_urls("see https://vault.fbi.gov/UFO") == ["https://vault.fbi.gov/UFO"]


def test_trailing_punctuation_is_trimmed():
    text = "Docs (https://www.cia.gov/readingroom). Also https://example.com/a, and https://example.com/b."
    assert find_urls(text) == [
        "https://www.cia.gov/readingroom",
        "https://example.com/a",
        "https://example.com/b",
    ]


def test_multiple_urls_on_one_line():
    text = "[1] http://a.example/x [2] https://b.example/y"
    assert find_urls(text) == ["http://a.example/x", "https://b.example/y"]


def test_bare_scheme_is_not_a_url():
    assert find_urls("broken https:// link") == []


def test_extract_sources_builds_typed_records():
    text = "MKUltra files: https://www.cia.gov/readingroom/docs/a.pdf and https://vault.fbi.gov/b"
    sources = extract_sources(text)

    assert [s.id for s in sources] == ["ai-1", "ai-2"]
    assert [s.title for s in sources] == ["Source 1", "Source 2"]
    assert [s.type for s in sources] == [SourceType.CIA, SourceType.FBI]
    assert sources[0].description == "CIA declassified document"
    assert sources[0].snippet == text[:200] + "..."


def test_extract_sources_respects_cap_and_keeps_duplicates():
    text = " ".join(f"https://example.com/{i}" for i in range(20)) + " https://example.com/0"
    sources = extract_sources(text)
    assert len(sources) == 15
    assert sources[-1].url == "https://example.com/14"

    twice = extract_sources("https://x.example https://x.example")
    assert [s.url for s in twice] == ["https://x.example", "https://x.example"]


def test_extract_sources_custom_prefix_and_zero_cap():
    assert extract_sources("https://a.example", prefix="web")[0].id == "web-1"
    assert extract_sources("https://a.example", max_sources=0) == []
    assert extract_sources("") == []


def test_citation_markers_resolve_to_sources_in_order():
    text = "Paperclip [1] was reviewed by the FBI [2]. https://www.cia.gov/x https://vault.fbi.gov/y"
    sources = extract_sources(text)

    markers = find_citation_markers(text)
    assert markers == [1, 2]
    assert resolve_citation(1, sources).url == "https://www.cia.gov/x"
    assert resolve_citation(2, sources).url == "https://vault.fbi.gov/y"


def test_out_of_range_markers_resolve_to_none():
    sources = extract_sources("https://a.example")
    assert resolve_citation(0, sources) is None
    assert resolve_citation(-1, sources) is None
    assert resolve_citation(2, sources) is None
