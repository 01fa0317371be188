"""Core data models for imagemeta-snapshot.

Snapshot Lifecycle:
-------------------
A snapshot is a flat ``path=size`` listing of one directory, stored next to a
metadata file that binds the listing to its own filesystem timestamps:

1. Save: enumerate files, replace any previous snapshot for the same target,
   write the listing and its metadata
2. Compare: verify the latest snapshot against its metadata, then diff it
   against a fresh enumeration

Only one snapshot per target is kept, so "latest" is also "only" in practice.
"""

from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .utils import humanize_size


# ============= File Information =============

class FileRecord(BaseModel):
    """One enumerated file.

    ``path`` is always absolute and normalized so records from different
    enumerations compare equal.
    """

    path: str
    size: int = Field(ge=0)
    mtime: Optional[float] = None
    format: Optional[str] = None  # lowercase extension without dot

    @property
    def name(self) -> str:
        return Path(self.path).name


class FileDetails(BaseModel):
    """Statistics for a single file, as shown by `imagemeta file-stats`.

    ``format`` is detected from the leading bytes, not the extension.
    """

    path: str
    size: int = Field(ge=0)
    extension: str = ""
    format: Optional[str] = None
    mime_type: Optional[str] = None
    modified: datetime
    created: datetime

    @property
    def name(self) -> str:
        return Path(self.path).name


# ============= Snapshot Metadata =============

class SnapshotMetadata(BaseModel):
    """Companion record stored in <snapshot>.metadata."""

    hash: str
    timestamp: str  # YYYYMMDD_HHMMSS
    file_size: int
    file_count: Optional[int] = None


class SnapshotInfo(BaseModel):
    """Latest snapshot of a target and whether it passed verification."""

    snapshot_path: str
    metadata: Optional[SnapshotMetadata] = None
    verified: bool = False
    problem: Optional[str] = None


# ============= Change Detection =============

class ComparisonResult(BaseModel):
    """Result of comparing a snapshot with the current directory.

    The three lists are disjoint. Paths whose size did not change appear in
    none of them. Every rename target in ``renames`` is also in ``modified``.
    """

    new: List[str] = Field(default_factory=list)
    modified: List[str] = Field(default_factory=list)
    deleted: List[str] = Field(default_factory=list)
    renames: Dict[str, str] = Field(default_factory=dict)  # old path -> new path

    @property
    def has_changes(self) -> bool:
        return bool(self.new or self.modified or self.deleted)

    @property
    def total(self) -> int:
        return len(self.new) + len(self.modified) + len(self.deleted)

    def summary(self) -> str:
        """Get human-readable summary."""
        if not self.has_changes:
            return "No changes detected"
        parts = [
            f"{len(self.new)} new",
            f"{len(self.modified)} modified",
            f"{len(self.deleted)} deleted",
        ]
        if self.renames:
            parts.append(f"{len(self.renames)} renamed")
        return ", ".join(parts)


# ============= Directory Statistics =============

class DirectoryStats(BaseModel):
    """Aggregate statistics for a directory tree."""

    root: str
    total_files: int = 0
    image_files: int = 0
    total_size: int = 0
    average_size: int = 0
    largest_file: Optional[FileRecord] = None
    smallest_file: Optional[FileRecord] = None  # Smallest non-empty file
    most_common_type: str = "unknown"
    subdirectory_count: int = 0
    empty_files: int = 0
    extensions: List[str] = Field(default_factory=list)
    newest_file: Optional[FileRecord] = None
    oldest_file: Optional[FileRecord] = None

    def summary(self) -> str:
        """Get human-readable summary."""
        return (
            f"{self.image_files} images of {self.total_files} files "
            f"({humanize_size(self.total_size)})"
        )
