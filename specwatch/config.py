"""
Runtime configuration for a watcher run.

Values come from CLI flags first, then SPECWATCH_* environment variables
(optionally loaded from .env), then defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_DIFF_COMMAND = "npx -y @redocly/cli@latest diff"
META_FILENAME = "meta.json"
RUN_LOG_FILENAME = "runs.log"


@dataclass(frozen=True)
class WatchConfig:
    source_url: str
    data_dir: Path = Path("data")
    diff_dir: Path = Path("diffs")
    log_dir: Path = Path("logs")
    diff_command: str = DEFAULT_DIFF_COMMAND
    fetch_timeout: float = 30.0
    diff_timeout: Optional[float] = None
    legacy_pointers: bool = False
    log_level: str = "INFO"

    @property
    def meta_path(self) -> Path:
        return self.data_dir / META_FILENAME

    @property
    def run_log_path(self) -> Path:
        return self.log_dir / RUN_LOG_FILENAME

    def ensure_dirs(self) -> None:
        for d in (self.data_dir, self.diff_dir, self.log_dir):
            d.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_env(
        cls,
        source_url: Optional[str] = None,
        data_dir: Optional[str] = None,
        diff_dir: Optional[str] = None,
        log_dir: Optional[str] = None,
        diff_command: Optional[str] = None,
        fetch_timeout: Optional[float] = None,
        diff_timeout: Optional[float] = None,
        legacy_pointers: bool = False,
        log_level: Optional[str] = None,
    ) -> "WatchConfig":
        """Build a config where explicit arguments override SPECWATCH_* variables.

        Raises:
            ValueError: If no source URL is available or a numeric value is malformed.
        """
        url = source_url or os.getenv("SPECWATCH_SOURCE_URL")
        if not url:
            raise ValueError("SPECWATCH_SOURCE_URL not set. Set env var or pass --url.")

        timeout = fetch_timeout
        if timeout is None:
            raw = os.getenv("SPECWATCH_FETCH_TIMEOUT")
            try:
                timeout = float(raw) if raw else 30.0
            except ValueError:
                raise ValueError(f"SPECWATCH_FETCH_TIMEOUT must be a number, got: {raw!r}")

        return cls(
            source_url=url,
            data_dir=Path(data_dir or os.getenv("SPECWATCH_DATA_DIR") or "data"),
            diff_dir=Path(diff_dir or os.getenv("SPECWATCH_DIFF_DIR") or "diffs"),
            log_dir=Path(log_dir or os.getenv("SPECWATCH_LOG_DIR") or "logs"),
            diff_command=diff_command or os.getenv("SPECWATCH_DIFF_COMMAND") or DEFAULT_DIFF_COMMAND,
            fetch_timeout=timeout,
            diff_timeout=diff_timeout,
            legacy_pointers=legacy_pointers or os.getenv("SPECWATCH_LEGACY_POINTERS", "").lower() in ("1", "true", "yes"),
            log_level=(log_level or os.getenv("SPECWATCH_LOG_LEVEL") or "INFO").upper(),
        )
