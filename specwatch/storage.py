"""
State store for the watched document's metadata record.

One JSON object per watched document (meta.json). Missing or unreadable
state is the normal first-run condition and loads as an empty record.
"""

import json
from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Any, Dict, Optional

from .logger import get_logger

# Dataclass field -> JSON key in meta.json
JSON_KEYS = {
    "etag": "etag",
    "last_modified": "lastModified",
    "latest_file": "latestFile",
    "latest_hash": "latestHash",
    "previous_file": "previousFile",
    "previous_hash": "previousHash",
}


@dataclass(frozen=True)
class MetadataRecord:
    """Cache validators, content hash and snapshot pointers from the last runs."""

    etag: Optional[str] = None
    last_modified: Optional[str] = None
    latest_file: Optional[str] = None
    latest_hash: Optional[str] = None
    previous_file: Optional[str] = None
    previous_hash: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return all(v is None for v in asdict(self).values())

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {JSON_KEYS[f.name]: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MetadataRecord":
        """Merge a decoded meta.json object over the empty record.

        Unknown keys are ignored; non-string values are treated as absent.
        """
        values = {}
        for name, key in JSON_KEYS.items():
            value = data.get(key)
            values[name] = value if isinstance(value, str) else None
        return cls(**values)


def read_metadata(path: Path) -> Optional[MetadataRecord]:
    """Return the stored record, or None when there is no usable state file."""
    if not path.exists():
        return None
    try:
        with path.open("r", encoding="utf-8") as f:
            content = f.read().strip()
    except (OSError, UnicodeDecodeError) as e:
        get_logger().warning("Could not read metadata, starting fresh", path=str(path), error=str(e))
        return None
    if not content:
        return None
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        get_logger().warning("Corrupt metadata, starting fresh", path=str(path), error=str(e))
        return None
    if not isinstance(data, dict):
        get_logger().warning("Metadata is not a JSON object, starting fresh", path=str(path))
        return None
    return MetadataRecord.from_dict(data)


def load_metadata(path: Path) -> MetadataRecord:
    record = read_metadata(path)
    if record is None:
        return MetadataRecord()
    return record


def atomic_write_bytes(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp_path.write_bytes(data)
        tmp_path.replace(path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise


def atomic_write_text(path: Path, text: str) -> None:
    atomic_write_bytes(path, text.encode("utf-8"))


def save_metadata(path: Path, record: MetadataRecord) -> None:
    """Overwrite the state file with the full record."""
    atomic_write_text(path, json.dumps(record.to_dict(), indent=2, ensure_ascii=False))
