"""Best-effort owner-only permissions for snapshot storage."""

import logging
import os
from pathlib import Path

from .constants import OWNER_DIR_MODE, OWNER_FILE_MODE

logger = logging.getLogger(__name__)


def supports_posix_permissions() -> bool:
    """Check whether chmod mode bits are meaningful on this platform."""
    return os.name == "posix"


def restrict_to_owner(path: Path) -> bool:
    """Restrict a file or directory to its owner.

    Directories get 0o700, files 0o600. On platforms without POSIX mode bits
    this is a no-op. Failures are logged and never raised.

    Returns:
        True if permissions were applied
    """
    if not supports_posix_permissions():
        logger.debug("Owner-only permissions not supported here, skipping %s", path)
        return False

    mode = OWNER_DIR_MODE if path.is_dir() else OWNER_FILE_MODE
    try:
        os.chmod(path, mode)
    except OSError as e:
        logger.warning("Could not restrict permissions on %s: %s", path, e)
        return False
    return True
