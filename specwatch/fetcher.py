"""Conditional HTTP retrieval of the watched document."""

from dataclasses import dataclass
from typing import Dict, Optional

import requests

from . import __version__
from .logger import get_logger
from .storage import MetadataRecord

USER_AGENT = f"specwatch/{__version__}"


class FetchError(Exception):
    """Raised when the request fails before any HTTP status is received."""
    pass


@dataclass(frozen=True)
class FetchResult:
    status: int
    reason: str = ""
    etag: Optional[str] = None
    last_modified: Optional[str] = None
    body: bytes = b""

    @property
    def not_modified(self) -> bool:
        return self.status == 304

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def conditional_headers(record: MetadataRecord) -> Dict[str, str]:
    """Request preconditions from the stored validators.

    Nothing is sent while no snapshot hash is known, so a first run always
    receives a full body.
    """
    headers: Dict[str, str] = {}
    if not record.latest_hash:
        return headers
    if record.etag:
        headers["If-None-Match"] = record.etag
    if record.last_modified:
        headers["If-Modified-Since"] = record.last_modified
    return headers


def fetch_document(url: str, headers: Optional[Dict[str, str]] = None, timeout: float = 30.0) -> FetchResult:
    """Fetch URL once and return status, validators and raw body.

    Any HTTP status is returned as a FetchResult; only network-level
    failures raise.

    Raises:
        FetchError: On timeout, connection failure or any other request error
    """
    logger = get_logger()
    request_headers = {"User-Agent": USER_AGENT}
    request_headers.update(headers or {})
    logger.record_fetch()
    logger.debug("Fetching document", url=url, conditional=sorted((headers or {}).keys()))
    try:
        resp = requests.get(url, headers=request_headers, timeout=timeout)
    except requests.exceptions.Timeout:
        logger.record_error("Timeout")
        raise FetchError(f"Request timed out after {timeout}s: {url}")
    except requests.exceptions.RequestException as e:
        logger.record_error(type(e).__name__)
        raise FetchError(f"Request error: {e}")

    return FetchResult(
        status=resp.status_code,
        reason=resp.reason or "",
        etag=resp.headers.get("ETag"),
        last_modified=resp.headers.get("Last-Modified"),
        body=resp.content if resp.status_code != 304 else b"",
    )
