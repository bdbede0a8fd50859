from datetime import datetime
from pathlib import Path

from .differ import format_timestamp
from .logger import get_logger


def append_run_log(path: Path, verb: str, details: str, now: datetime) -> str:
    """Append `[<ISO timestamp>] <VERB> <details>` to the run log and echo it.

    Whitespace in details is collapsed so every run is exactly one line.
    """
    line = f"{verb} {' '.join(details.split())}".rstrip()
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        f.write(f"[{format_timestamp(now)}] {line}\n")
    if verb == "ERROR":
        get_logger().error(line)
    else:
        get_logger().info(line)
    return line


def read_run_log(path: Path) -> list[str]:
    if not path.exists():
        return []
    with path.open("r", encoding="utf-8") as f:
        return [line.rstrip("\n") for line in f if line.strip()]
