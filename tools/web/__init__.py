"""General web search for the research engine."""

from .aggregator import WebSearchAggregator
from .contracts import SearchResult
from .factory import create_web_aggregator

__all__ = ["SearchResult", "WebSearchAggregator", "create_web_aggregator"]
