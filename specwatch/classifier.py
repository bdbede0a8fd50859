"""
Change classification for a fetched document.

Responsibilities:
- Decide which terminal verdict a fetch result leads to.
- Hash content and derive snapshot names.
- Compute the metadata record that follows each verdict.

Non-Responsibilities:
- No I/O. Callers fetch, write and persist.

Invariant:
previous_* pointers move only on SAVED, together with latest_*.
"""

import hashlib
from dataclasses import replace
from datetime import date
from enum import Enum
from typing import Optional

from .fetcher import FetchResult
from .storage import MetadataRecord

HASH_PREFIX_LEN = 12


class Verdict(str, Enum):
    NOT_MODIFIED = "NOT_MODIFIED"
    ERROR = "ERROR"
    UNCHANGED = "UNCHANGED"
    SAVED = "SAVED"

    @property
    def exit_code(self) -> int:
        return 1 if self is Verdict.ERROR else 0


def content_hash(body: bytes) -> str:
    return hashlib.sha256(body).hexdigest()


def snapshot_name(digest: str, captured: date) -> str:
    """Deterministic snapshot file name: {YYYY-MM-DD}-{sha256[:12]}.json"""
    return f"{captured.isoformat()}-{digest[:HASH_PREFIX_LEN]}.json"


def classify(
    record: MetadataRecord,
    result: FetchResult,
    digest: Optional[str] = None,
    snapshot_present: bool = True,
) -> Verdict:
    """
    Map a fetch result and the prior record to a verdict.

    Args:
        record: Metadata loaded before the fetch
        result: Response of the conditional fetch
        digest: content_hash(result.body); computed here when omitted
        snapshot_present: False when record.latest_file is missing on disk

    Returns:
        Verdict for this invocation
    """
    if result.not_modified:
        # Preconditions are only sent once a snapshot hash is known.
        return Verdict.NOT_MODIFIED if record.latest_hash else Verdict.ERROR
    if not result.ok:
        return Verdict.ERROR
    if not record.latest_hash:
        return Verdict.SAVED

    if digest is None:
        digest = content_hash(result.body)
    if digest == record.latest_hash and snapshot_present:
        return Verdict.UNCHANGED
    return Verdict.SAVED


def refresh_validators(record: MetadataRecord, result: FetchResult) -> MetadataRecord:
    """Record after UNCHANGED: only the cache validators follow the response."""
    return replace(record, etag=result.etag, last_modified=result.last_modified)


def rotate(record: MetadataRecord, result: FetchResult, name: str, digest: str) -> MetadataRecord:
    """Record after SAVED: latest moves to previous, the new snapshot becomes latest.

    Re-archiving the content already recorded as latest (its file went
    missing) keeps the previous pointers as they were.
    """
    if digest == record.latest_hash:
        previous_file, previous_hash = record.previous_file, record.previous_hash
    else:
        previous_file, previous_hash = record.latest_file, record.latest_hash
    return MetadataRecord(
        etag=result.etag,
        last_modified=result.last_modified,
        latest_file=name,
        latest_hash=digest,
        previous_file=previous_file,
        previous_hash=previous_hash,
    )
