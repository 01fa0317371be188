"""Directory snapshots with tamper-evident integrity checks."""

from .config import SnapshotConfig, load_config
from .constants import PACKAGE_VERSION as __version__
from .core import (
    ComparisonResult,
    DirectoryStats,
    FileDetails,
    FileRecord,
    SnapshotInfo,
    SnapshotMetadata,
)
from .diffing import compute_diff
from .errors import ConfigError, IntegrityError, IntegrityViolationError, SnapshotError
from .scanner import describe_file, enumerate_files
from .search import search_files
from .stats import compute_stats
from .store import SnapshotStore

__all__ = [
    "ComparisonResult",
    "ConfigError",
    "DirectoryStats",
    "FileDetails",
    "FileRecord",
    "IntegrityError",
    "IntegrityViolationError",
    "SnapshotConfig",
    "SnapshotError",
    "SnapshotInfo",
    "SnapshotMetadata",
    "SnapshotStore",
    "compute_diff",
    "compute_stats",
    "describe_file",
    "enumerate_files",
    "load_config",
    "search_files",
]
