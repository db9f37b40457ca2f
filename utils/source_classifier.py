"""
Map a URL to its provenance tag.

Rules are checked top to bottom and the first match wins, so the specific
government archive domains always beat the generic snapshot and academic
patterns. A snapshot of a cia.gov page therefore classifies as CIA.
"""

from models.source import SourceType

# (substrings, type, description) in priority order
CLASSIFICATION_RULES: tuple[tuple[tuple[str, ...], SourceType, str], ...] = (
    (("cia.gov", "foia.cia"), SourceType.CIA, "CIA declassified document"),
    (("fbi.gov", "vault.fbi"), SourceType.FBI, "FBI Vault document"),
    (("archives.gov", "nara.gov"), SourceType.NARA, "National Archives document"),
    (("nsa.gov",), SourceType.NSA, "NSA declassified material"),
    (("archive.org",), SourceType.WAYBACK, "Internet Archive resource"),
    (("osti.gov", "doe.gov", "opennet"), SourceType.DOE, "Department of Energy document"),
    ((".edu", "jstor"), SourceType.ACADEMIC, "Academic source"),
)


def classify(url) -> tuple[SourceType, str]:
    """
    Classify a URL. Never raises; anything unrecognised (including
    non-string input) is generic web with an empty description.
    """
    if not isinstance(url, str):
        return SourceType.WEB, ""

    lowered = url.lower()
    for patterns, source_type, description in CLASSIFICATION_RULES:
        if any(p in lowered for p in patterns):
            return source_type, description
    return SourceType.WEB, ""


def classify_type(url) -> SourceType:
    return classify(url)[0]
