"""
Cleanup module for deprecated pointer files.

Older versions kept latest.json and previous.json copies beside the dated
snapshots. meta.json already records both pointers, so the copies can be
removed once. Dated snapshots and diff reports are never touched.
"""

from pathlib import Path
from typing import List

from .archive import LATEST_POINTER, PREVIOUS_POINTER
from .logger import get_logger


def cleanup_legacy_pointers(data_dir: Path) -> List[Path]:
    """
    Remove latest.json / previous.json from the data directory if present.

    Args:
        data_dir: Snapshot and metadata directory

    Returns:
        Paths that were removed (empty when there was nothing to do)
    """
    logger = get_logger()
    removed: List[Path] = []
    for name in (LATEST_POINTER, PREVIOUS_POINTER):
        path = data_dir / name
        if not path.is_file():
            continue
        try:
            path.unlink()
        except OSError as e:
            logger.error(f"Could not remove {path}", error=str(e))
            continue
        removed.append(path)

    logger.info(
        f"Legacy cleanup complete: {len(removed)} removed",
        data_dir=str(data_dir),
        removed=[p.name for p in removed],
    )
    return removed
