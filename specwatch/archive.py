"""
Snapshot archive and diff reports.

Snapshots are write-once files in the data directory; diff reports are
write-once files in the diff directory, named by generation time.
"""

import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from .config import WatchConfig
from .differ import DiffResult, diff_stamp, format_diff_report
from .logger import get_logger
from .storage import atomic_write_bytes, atomic_write_text

LATEST_POINTER = "latest.json"
PREVIOUS_POINTER = "previous.json"

Differ = Callable[[Path, Path], DiffResult]
Clock = Callable[[], datetime]


class SnapshotWriteError(Exception):
    """Raised when a snapshot could not be written completely."""
    pass


class Archive:
    def __init__(self, config: WatchConfig, differ: Differ):
        self.config = config
        self.differ = differ

    def snapshot_path(self, name: str) -> Path:
        return self.config.data_dir / name

    def has_snapshot(self, name: Optional[str]) -> bool:
        return bool(name) and self.snapshot_path(name).is_file()

    def write_snapshot(self, name: str, body: bytes) -> Path:
        """Write raw body bytes under the snapshot name.

        Raises:
            SnapshotWriteError: If the file could not be written
        """
        path = self.snapshot_path(name)
        try:
            atomic_write_bytes(path, body)
        except OSError as e:
            get_logger().record_error("SnapshotWriteError")
            raise SnapshotWriteError(f"Failed to write snapshot {name}: {e}") from e
        get_logger().debug("Snapshot written", path=str(path), size=len(body))
        return path

    def write_diff(self, old_name: str, new_name: str, clock: Clock) -> Optional[Path]:
        """Diff old against new and write a report.

        The report is stamped with a clock reading taken after the diff tool
        returns. Returns the report path, or None when the old snapshot is
        not on disk.
        """
        logger = get_logger()
        old_path = self.snapshot_path(old_name)
        if not old_path.is_file():
            logger.warning("Previous snapshot missing, skipping diff", snapshot=old_name)
            return None

        result = self.differ(old_path, self.snapshot_path(new_name))
        logger.record_diff(result.failed)
        if result.failed:
            logger.warning("Diff tool reported a failure; output kept in report", old=old_name, new=new_name)

        stamp = diff_stamp(clock())
        report_path = self.config.diff_dir / f"{stamp}.txt"
        atomic_write_text(report_path, format_diff_report(stamp, old_name, new_name, result))
        logger.info(f"Diff written to {report_path}")
        return report_path

    def update_pointers(self, prior_name: Optional[str], body: bytes) -> bool:
        """Maintain the deprecated latest.json / previous.json copies.

        Returns False when the prior snapshot could not be copied to
        previous.json; latest.json is written either way.
        """
        copied = False
        if prior_name:
            prior = self.snapshot_path(prior_name)
            if prior.is_file():
                try:
                    shutil.copyfile(prior, self.config.data_dir / PREVIOUS_POINTER)
                    copied = True
                except OSError as e:
                    get_logger().debug("Skipping previous pointer copy", snapshot=prior_name, error=str(e))
        atomic_write_bytes(self.config.data_dir / LATEST_POINTER, body)
        return copied
