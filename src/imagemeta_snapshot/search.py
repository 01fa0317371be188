"""Filtering of enumerated image files by name and year."""

from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .config import SnapshotConfig
from .core import FileRecord
from .scanner import enumerate_files


def matches(record: FileRecord, name: Optional[str] = None, year: Optional[int] = None) -> bool:
    """Check a record against every given criterion.

    ``name`` is a case-insensitive substring of the file name. ``year`` is
    the local-time year of the last modification.
    """
    if name is not None and name.lower() not in record.name.lower():
        return False
    if year is not None:
        if record.mtime is None or datetime.fromtimestamp(record.mtime).year != year:
            return False
    return True


def search_files(
    root: Path,
    name: Optional[str] = None,
    year: Optional[int] = None,
    config: Optional[SnapshotConfig] = None,
) -> List[FileRecord]:
    """Enumerate image files under root and keep those matching all criteria.

    With no criteria every enumerated file matches.

    Raises:
        NotADirectoryError: If root is not a directory
    """
    return [r for r in enumerate_files(root, config) if matches(r, name, year)]
