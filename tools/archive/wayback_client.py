"""Async client for the Internet Archive CDX capture index."""

import json
from dataclasses import dataclass

import httpx

from utils.logger import get_logger

logger = get_logger(__name__)

CDX_API_URL = "http://web.archive.org/cdx/search/cdx"
DEFAULT_TIMEOUT_S = 15.0


@dataclass(frozen=True)
class CDXRecord:
    timestamp: str
    original: str


class WaybackCDXClient:
    def __init__(
        self,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        base_url: str = CDX_API_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            timeout_s: Per-request timeout
            base_url: CDX endpoint
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.timeout_s = timeout_s
        self.base_url = base_url
        self._transport = transport

    async def query(self, domain_pattern: str, from_date: str, to_date: str, limit: int) -> list[CDXRecord]:
        """
        List captures matching ``domain_pattern`` between two YYYYMMDD dates.

        Raises:
            httpx.HTTPError: on transport failure or non-success status
        """
        params = {
            "url": domain_pattern,
            "from": from_date,
            "to": to_date,
            "output": "json",
            "collapse": "urlkey",
            "limit": str(limit),
        }
        async with httpx.AsyncClient(timeout=self.timeout_s, transport=self._transport) as client:
            response = await client.get(self.base_url, params=params)
            response.raise_for_status()

        return parse_cdx_body(response.text)[:limit]


def parse_cdx_body(body: str) -> list[CDXRecord]:
    """
    Parse a CDX response body.

    ``output=json`` yields a list of rows whose first row is the field
    header. Plain-text bodies (space separated, no header) are accepted too.
    """
    body = (body or "").strip()
    if not body:
        return []

    try:
        rows = json.loads(body)
    except json.JSONDecodeError:
        records = []
        for line in body.splitlines():
            fields = line.split(" ")
            if len(fields) >= 3:
                records.append(CDXRecord(timestamp=fields[1], original=fields[2]))
        return records

    if not isinstance(rows, list) or not rows:
        return []

    header = rows[0]
    try:
        ts_idx = header.index("timestamp")
        orig_idx = header.index("original")
    except (ValueError, AttributeError):
        # no header row; use the CDX default field order
        ts_idx, orig_idx = 1, 2
        header_rows = 0
    else:
        header_rows = 1

    records = []
    for row in rows[header_rows:]:
        if isinstance(row, list) and len(row) > max(ts_idx, orig_idx):
            records.append(CDXRecord(timestamp=str(row[ts_idx]), original=str(row[orig_idx])))
        else:
            logger.debug(f"Skipping malformed CDX row: {row!r}")
    return records
