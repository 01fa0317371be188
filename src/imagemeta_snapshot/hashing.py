"""Hashing utilities for snapshot integrity.

The integrity digest binds a snapshot file's bytes to the file's own
filesystem timestamps. Editing the listing changes the content hash, and
replacing the file with an identical copy changes its timestamps, so both
show up as a digest mismatch.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Tuple
import hashlib
import os


def file_timestamps(st: os.stat_result) -> Tuple[datetime, datetime]:
    """Return (created, modified) as UTC datetimes.

    Creation time comes from st_birthtime where the platform exposes it.
    Elsewhere it falls back to the modification time.
    """
    modified = datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)
    birthtime = getattr(st, "st_birthtime", None)
    if birthtime is None:
        return modified, modified
    return datetime.fromtimestamp(birthtime, tz=timezone.utc), modified


def compute_snapshot_digest(path: Path) -> str:
    """Compute the integrity digest of a snapshot file.

    SHA256 over the file contents followed by
    "<created ISO-8601>|<modified ISO-8601>" as UTF-8 text.

    Args:
        path: Path to the snapshot file

    Returns:
        64-character lowercase hex digest
    """
    sha256 = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            sha256.update(chunk)

    created, modified = file_timestamps(path.stat())
    sha256.update(f"{created.isoformat()}|{modified.isoformat()}".encode("utf-8"))
    return sha256.hexdigest()


__all__ = [
    "compute_snapshot_digest",
    "file_timestamps",
]
