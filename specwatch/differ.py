"""
Diff capability: compare two snapshot files and capture the output.

A failing diff tool never raises; its output is kept for the report.
"""

import difflib
import os
import shlex
import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

UNIFIED = "unified"


@dataclass(frozen=True)
class DiffResult:
    stdout: str = ""
    stderr: str = ""
    failed: bool = False


class CommandDiffer:
    """Runs an external diff tool as `command old new`."""

    def __init__(self, command: List[str], timeout: Optional[float] = None):
        if not command:
            raise ValueError("Diff command must not be empty")
        self.command = list(command)
        if os.name == "nt" and self.command[0] == "npx":
            self.command[0] = "npx.cmd"
        self.timeout = timeout

    def __call__(self, old_path: Path, new_path: Path) -> DiffResult:
        cmd = self.command + [str(old_path), str(new_path)]
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            return DiffResult(
                stdout=_as_text(e.stdout),
                stderr=f"Diff command timed out after {self.timeout}s",
                failed=True,
            )
        except OSError as e:
            return DiffResult(stderr=f"Diff command could not be started: {e}", failed=True)
        return DiffResult(stdout=proc.stdout or "", stderr=proc.stderr or "", failed=proc.returncode != 0)


class UnifiedDiffer:
    """Line-based unified diff, for hosts without the external tool."""

    def __call__(self, old_path: Path, new_path: Path) -> DiffResult:
        try:
            old_lines = old_path.read_text(encoding="utf-8").splitlines(keepends=True)
            new_lines = new_path.read_text(encoding="utf-8").splitlines(keepends=True)
        except (OSError, UnicodeDecodeError) as e:
            return DiffResult(stderr=str(e), failed=True)
        out = difflib.unified_diff(old_lines, new_lines, fromfile=old_path.name, tofile=new_path.name)
        return DiffResult(stdout="".join(out))


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def build_differ(command: str, timeout: Optional[float] = None):
    """Pick a differ from the configured command string ("unified" selects the built-in one)."""
    if command.strip().lower() == UNIFIED:
        return UnifiedDiffer()
    return CommandDiffer(shlex.split(command), timeout=timeout)


def diff_stamp(now: datetime) -> str:
    """Filesystem-safe generation timestamp, e.g. 2026-10-18T07-30-00-123Z."""
    return format_timestamp(now).replace(":", "-").replace(".", "-")


def format_timestamp(now: datetime) -> str:
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_diff_report(stamp: str, old_name: str, new_name: str, result: DiffResult) -> str:
    lines = [
        f"=== {stamp} DIFF ===",
        f"Old: {old_name}",
        f"New: {new_name}",
        "",
        result.stdout,
    ]
    if result.stderr:
        lines.append(f"\n[stderr]\n{result.stderr}")
    return "\n".join(lines)
