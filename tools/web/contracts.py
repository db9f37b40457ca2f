"""Data contracts for the web search module."""

from dataclasses import dataclass


@dataclass
class SearchResult:
    """Raw row from a search engine, before de-duplication and scoring."""

    title: str
    url: str
    snippet: str = ""
    engine: str = ""


@dataclass
class ScoredResult:
    result: SearchResult
    score: int
