from urllib.parse import urlsplit

from .contracts import SearchResult

LOW_VALUE_MARKERS = ("pinterest", "quora")

DOMAIN_BOOSTS = ((".gov", 15), (".edu", 12), (".org", 8))
ARCHIVE_HOST = "archive.org"


def canonical_key(url: str) -> str:
    """
    De-duplication key for a result URL.

    Drops the scheme, a leading ``www.``, the query string, the fragment and
    a trailing slash; the host is lower-cased, the path is kept as is.
    """
    raw = (url or "").strip()
    try:
        parts = urlsplit(raw if "://" in raw else f"//{raw}")
    except ValueError:
        # malformed (e.g. unbalanced IPv6 brackets); callers drop empty keys
        return ""
    host = (parts.netloc or "").lower()
    if host.startswith("www."):
        host = host[4:]
    path = parts.path.rstrip("/")
    return f"{host}{path}"


def _host(url: str) -> str:
    try:
        return (urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""


def score_result(result: SearchResult, query: str) -> int:
    """
    Relevance heuristic for one row.

    +10 full query in title; per query word longer than 2 chars +3 in title
    and +1 in snippet; authority boost by TLD; +10 for Internet Archive
    hosts; -5 for low-value Q&A and pin boards.
    """
    title = (result.title or "").lower()
    snippet = (result.snippet or "").lower()
    url = (result.url or "").lower()
    query_lower = (query or "").lower().strip()

    score = 0
    if query_lower and query_lower in title:
        score += 10

    for word in query_lower.split():
        if len(word) <= 2:
            continue
        if word in title:
            score += 3
        if word in snippet:
            score += 1

    host = _host(result.url)
    for suffix, boost in DOMAIN_BOOSTS:
        if host.endswith(suffix):
            score += boost
            break

    if host == ARCHIVE_HOST or host.endswith("." + ARCHIVE_HOST):
        score += 10

    if any(marker in url for marker in LOW_VALUE_MARKERS):
        score -= 5

    return score
