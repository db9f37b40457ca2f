"""Factory for building the web search aggregator from configuration."""

from config.config import Config
from utils.logger import get_logger

from .aggregator import WebSearchAggregator
from .cache import InMemoryTTLCache
from .engines import BraveEngine, DuckDuckGoEngine, TavilyEngine, WebSearchEngine

logger = get_logger(__name__)

# Singleton cache instance (process-shared)
_cache_instance = None


def create_engines(config: Config) -> list[WebSearchEngine]:
    engines: list[WebSearchEngine] = []
    if config.ENABLE_DUCKDUCKGO:
        engines.append(DuckDuckGoEngine())
    if config.BRAVE_API_KEY:
        engines.append(BraveEngine(config.BRAVE_API_KEY, timeout_s=config.WEB_ENGINE_TIMEOUT_S))
    if config.TAVILY_API_KEY:
        engines.append(TavilyEngine(config.TAVILY_API_KEY))
    return engines


def create_web_aggregator(config: Config) -> WebSearchAggregator:
    """
    Build the aggregator with every engine the configuration enables.

    DuckDuckGo needs no key; Brave and Tavily are added when their keys are set.
    """
    global _cache_instance

    if _cache_instance is None:
        _cache_instance = InMemoryTTLCache(ttl_seconds=config.WEB_CACHE_TTL_SECONDS)

    engines = create_engines(config)
    if not engines:
        logger.warning("No web search engines enabled; web results will be empty")
    else:
        logger.info(f"Web search engines: {', '.join(e.name for e in engines)}")

    return WebSearchAggregator(engines, timeout_s=config.WEB_ENGINE_TIMEOUT_S, cache=_cache_instance)
