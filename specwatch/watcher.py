"""
One watcher invocation.

load metadata -> conditional fetch -> classify -> archive/diff on change
-> persist metadata -> run log line. Metadata is written last so a failed
run never points at a snapshot that does not exist.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Optional

from .archive import Archive, Clock, Differ, SnapshotWriteError
from .classifier import Verdict, classify, content_hash, refresh_validators, rotate, snapshot_name, HASH_PREFIX_LEN
from .config import WatchConfig
from .differ import build_differ
from .fetcher import FetchError, FetchResult, conditional_headers, fetch_document
from .logger import get_logger
from .runlog import append_run_log
from .storage import load_metadata, save_metadata

Fetch = Callable[..., FetchResult]


@dataclass(frozen=True)
class RunOutcome:
    verdict: Verdict
    message: str
    snapshot: Optional[str] = None
    diff_report: Optional[Path] = None

    @property
    def exit_code(self) -> int:
        return self.verdict.exit_code


def run_once(
    config: WatchConfig,
    fetch: Fetch = fetch_document,
    differ: Optional[Differ] = None,
    now: Optional[datetime] = None,
) -> RunOutcome:
    """
    Perform a single fetch-classify-archive cycle.

    Args:
        config: Paths, source URL and tool settings
        fetch: Transport, called as fetch(url, headers, timeout=...)
        differ: Diff capability; built from config.diff_command when omitted
        now: Clock override (UTC) for capture date and timestamps; when given,
            diff reports are stamped with it too

    Returns:
        RunOutcome with the verdict and what was written
    """
    logger = get_logger()
    logger.record_run()
    clock: Clock = (lambda: now) if now is not None else _utc_now
    now = clock()
    config.ensure_dirs()

    try:
        outcome = _run(config, fetch, differ or build_differ(config.diff_command, config.diff_timeout), now, clock)
    except (FetchError, SnapshotWriteError) as e:
        outcome = _finish(config, Verdict.ERROR, str(e), now)
    except Exception as e:
        # Anything else (unreadable data dir, report write failure) still ends the run as ERROR.
        logger.record_error(type(e).__name__)
        outcome = _finish(config, Verdict.ERROR, str(e) or type(e).__name__, now)

    logger.record_verdict(outcome.verdict.value)
    return outcome


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _run(config: WatchConfig, fetch: Fetch, differ: Differ, now: datetime, clock: Clock) -> RunOutcome:
    logger = get_logger()
    archive = Archive(config, differ)
    record = load_metadata(config.meta_path)
    if record.is_empty:
        logger.debug("No prior metadata, treating as first run", path=str(config.meta_path))

    snapshot_present = True
    headers: Dict[str, str] = conditional_headers(record)
    if record.latest_file and not archive.has_snapshot(record.latest_file):
        logger.warning("Latest snapshot missing on disk, fetching unconditionally", snapshot=record.latest_file)
        snapshot_present = False
        headers = {}

    result = fetch(config.source_url, headers, timeout=config.fetch_timeout)
    digest = content_hash(result.body) if result.ok else None
    verdict = classify(record, result, digest, snapshot_present=snapshot_present)

    if verdict is Verdict.NOT_MODIFIED:
        return _finish(config, verdict, "304 (server indicates no change)", now)

    if verdict is Verdict.ERROR:
        if result.not_modified:
            return _finish(config, verdict, "Fetch failed: 304 received without a stored snapshot", now)
        return _finish(config, verdict, f"Fetch failed: {result.status} {result.reason}".rstrip(), now)

    if verdict is Verdict.UNCHANGED:
        save_metadata(config.meta_path, refresh_validators(record, result))
        return _finish(config, verdict, "(hash match) - no new file saved", now)

    name = snapshot_name(digest, now.date())
    archive.write_snapshot(name, result.body)

    if config.legacy_pointers:
        archive.update_pointers(record.latest_file, result.body)

    report = None
    first_run = not record.latest_file
    if first_run:
        logger.info("First run: nothing to diff against.")
    elif record.latest_file != name:
        report = archive.write_diff(record.latest_file, name, clock)

    save_metadata(config.meta_path, rotate(record, result, name, digest))

    details = f"{name} (sha256 {digest[:HASH_PREFIX_LEN]})"
    if first_run:
        details += "; first run, nothing to diff against"
    elif not snapshot_present and digest == record.latest_hash:
        details += "; restored missing snapshot"
    return _finish(config, verdict, details, now, snapshot=name, diff_report=report)


def _finish(
    config: WatchConfig,
    verdict: Verdict,
    details: str,
    now: datetime,
    snapshot: Optional[str] = None,
    diff_report: Optional[Path] = None,
) -> RunOutcome:
    message = append_run_log(config.run_log_path, verdict.value, details, now)
    return RunOutcome(verdict=verdict, message=message, snapshot=snapshot, diff_report=diff_report)
