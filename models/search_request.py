from dataclasses import dataclass

from models.errors import InvalidSearchRequestError

ARCHIVE_SOURCES = ("cia", "fbi", "nara", "nsa")
REQUESTABLE_SOURCES = (*ARCHIVE_SOURCES, "wayback", "web")

MIN_SOURCES, MAX_SOURCES = 5, 50
MIN_ARCHIVE_YEARS, MAX_ARCHIVE_YEARS = 1, 75
DEFAULT_MAX_SOURCES = 20
DEFAULT_ARCHIVE_YEARS = 25


@dataclass(frozen=True)
class SearchRequest:
    """
    One validated research request.

    Validation runs on construction so malformed requests are rejected
    before any provider is contacted.
    """

    query: str
    sources: tuple[str, ...] = REQUESTABLE_SOURCES
    max_sources: int = DEFAULT_MAX_SOURCES
    archive_years: int = DEFAULT_ARCHIVE_YEARS
    conversation_id: str | None = None

    def __post_init__(self):
        if not isinstance(self.query, str) or not self.query.strip():
            raise InvalidSearchRequestError("query", "must be a non-empty string")

        sources = tuple(self.sources or ())
        if not sources:
            raise InvalidSearchRequestError("sources", "at least one source type is required")
        unknown = [s for s in sources if s not in REQUESTABLE_SOURCES]
        if unknown:
            raise InvalidSearchRequestError(
                "sources",
                f"unknown source type(s) {unknown}; expected any of {list(REQUESTABLE_SOURCES)}",
            )
        # de-dupe while keeping caller order
        object.__setattr__(self, "sources", tuple(dict.fromkeys(sources)))

        if isinstance(self.max_sources, bool) or not isinstance(self.max_sources, int):
            raise InvalidSearchRequestError("max_sources", "must be an integer")
        if not MIN_SOURCES <= self.max_sources <= MAX_SOURCES:
            raise InvalidSearchRequestError(
                "max_sources", f"must be between {MIN_SOURCES} and {MAX_SOURCES}"
            )

        if isinstance(self.archive_years, bool) or not isinstance(self.archive_years, int):
            raise InvalidSearchRequestError("archive_years", "must be an integer")
        if not MIN_ARCHIVE_YEARS <= self.archive_years <= MAX_ARCHIVE_YEARS:
            raise InvalidSearchRequestError(
                "archive_years",
                f"must be between {MIN_ARCHIVE_YEARS} and {MAX_ARCHIVE_YEARS}",
            )

    @property
    def archive_sources(self) -> list[str]:
        return [s for s in self.sources if s in ARCHIVE_SOURCES]

    @property
    def wants_web(self) -> bool:
        return "web" in self.sources

    @property
    def wants_snapshots(self) -> bool:
        return "wayback" in self.sources
