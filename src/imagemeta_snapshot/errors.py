"""Custom exceptions for imagemeta-snapshot.

This module defines typed exceptions so callers can tell a tampered snapshot
apart from ordinary I/O failures. A missing baseline is not an error: the
store returns ``None`` for it.
"""

from pathlib import Path
from typing import Optional


class SnapshotError(RuntimeError):
    """Base class for all snapshot-related errors."""
    pass


# Integrity Errors
class IntegrityError(SnapshotError):
    """Base class for data integrity errors."""
    pass


class IntegrityViolationError(IntegrityError):
    """Snapshot failed verification against its metadata."""

    def __init__(
        self,
        snapshot: Path,
        reason: str,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
    ):
        self.snapshot = snapshot
        self.reason = reason
        self.expected = expected
        self.actual = actual
        message = f"Integrity check failed for {snapshot.name}: {reason}"
        if expected is not None and actual is not None:
            message += (
                f"\n  Expected: {expected}"
                f"\n  Got:      {actual}"
            )
        message += "\nThe snapshot may have been tampered with."
        super().__init__(message)


# Configuration Errors
class ConfigError(SnapshotError):
    """Base class for configuration errors."""
    pass


class InvalidIdentityModeError(ConfigError):
    """Unknown snapshot identity mode."""

    def __init__(self, mode: str):
        self.mode = mode
        super().__init__(
            f"Unknown identity mode '{mode}'. "
            f"Use 'name' (directory base name) or 'path' (base name plus path hash)."
        )
