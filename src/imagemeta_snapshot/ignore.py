"""Gitignore-style pattern matching for directory scans."""

from pathlib import Path
from typing import Iterable

from pathspec import PathSpec
from pathspec.patterns import GitWildMatchPattern

from .constants import IGNORE_FILE, METADATA_DIR, SNAPSHOT_DIR


# Default patterns to always ignore
DEFAULTS = [
    # Version control
    ".git/",
    ".svn/",
    ".hg/",

    # Snapshot storage (when a store lives inside a scanned tree)
    f"{SNAPSHOT_DIR}/",
    f"{METADATA_DIR}/",

    # Photo library caches and thumbnails
    ".thumbnails/",
    "@eaDir/",
    ".picasaoriginals/",

    # OS files
    ".DS_Store",
    "._*",
    "Thumbs.db",
    "desktop.ini",
    ".Trash-*/",
]


class IgnoreSpec:
    """Manages gitignore-style patterns for file exclusion."""

    def __init__(self, root: Path, extra: Iterable[str] = ()):
        """Initialize ignore spec with default and custom patterns.

        Args:
            root: Scanned root directory
            extra: Additional patterns to include
        """
        self.root = root
        patterns = list(DEFAULTS)

        # Load directory-specific .imagemetaignore if it exists
        ignore_file = root / IGNORE_FILE
        if ignore_file.exists():
            for line in ignore_file.read_text().splitlines():
                line = line.strip()
                if line and not line.startswith("#"):
                    patterns.append(line)

        patterns.extend(extra)

        self.spec = PathSpec.from_lines(GitWildMatchPattern, patterns)

    def is_ignored(self, relpath: str) -> bool:
        """Check if a root-relative POSIX path should be ignored."""
        return self.spec.match_file(relpath)

    def should_traverse(self, dirpath: str) -> bool:
        """Check if a root-relative directory should be walked into."""
        if not dirpath.endswith("/"):
            dirpath = dirpath + "/"
        return not self.spec.match_file(dirpath)
