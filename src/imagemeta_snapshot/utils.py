"""Utility functions for imagemeta-snapshot."""

import os
from datetime import datetime
from pathlib import Path
from typing import Union

from .constants import TIMESTAMP_FORMAT


def normalize_path(path: Union[str, Path]) -> str:
    """Return an absolute, normalized path string without resolving symlinks."""
    return os.path.normpath(os.path.abspath(os.fspath(path)))


def humanize_size(size: float) -> str:
    """Convert bytes to human-readable format."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def get_timestamp() -> str:
    """Get current local time as a snapshot timestamp (YYYYMMDD_HHMMSS)."""
    return datetime.now().strftime(TIMESTAMP_FORMAT)


def format_mtime(mtime: float) -> str:
    """Format an epoch mtime for display.

    Examples:
        1724640677.31 -> "2024-08-26 02:51:17"
    """
    return datetime.fromtimestamp(mtime).strftime("%Y-%m-%d %H:%M:%S")


def format_snapshot_timestamp(timestamp: str) -> str:
    """Clean up a snapshot timestamp for display.

    Examples:
        "20250826_025117" -> "2025-08-26 02:51:17"
    """
    try:
        return datetime.strptime(timestamp, TIMESTAMP_FORMAT).strftime("%Y-%m-%d %H:%M:%S")
    except ValueError:
        return timestamp
