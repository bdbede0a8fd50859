"""
Test doubles and small builders shared by the test modules.
"""

import hashlib
from pathlib import Path
from typing import Dict, List, Optional

from specwatch.differ import DiffResult
from specwatch.fetcher import FetchResult

SOURCE_URL = "https://api.example.com/openapi.json"


def sha256(body: bytes) -> str:
    return hashlib.sha256(body).hexdigest()


def ok(body: bytes, etag: Optional[str] = None, last_modified: Optional[str] = None) -> FetchResult:
    return FetchResult(status=200, reason="OK", etag=etag, last_modified=last_modified, body=body)


class FakeTransport:
    """Stands in for fetch_document; returns queued results and records calls."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls: List[Dict] = []

    def __call__(self, url: str, headers: Optional[Dict[str, str]] = None, timeout: float = 30.0) -> FetchResult:
        self.calls.append({"url": url, "headers": dict(headers or {}), "timeout": timeout})
        result = self.results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


class FakeDiffer:
    """Stands in for the external diff tool."""

    def __init__(self, result: Optional[DiffResult] = None):
        self.result = result or DiffResult(stdout="1 change detected\n")
        self.calls: List[tuple] = []

    def __call__(self, old_path: Path, new_path: Path) -> DiffResult:
        self.calls.append((old_path, new_path))
        return self.result
