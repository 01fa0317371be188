"""Recursive discovery of supported image files."""

import logging
import os
from pathlib import Path
from typing import List, Optional

from .config import SnapshotConfig
from .core import FileDetails, FileRecord
from .hashing import file_timestamps
from .ignore import IgnoreSpec
from .utils import normalize_path

logger = logging.getLogger(__name__)

# Leading-byte signatures, checked in order
_SIGNATURES = (
    (b"\xff\xd8\xff", "jpeg"),
    (b"\x89PNG\r\n\x1a\n", "png"),
    (b"GIF87a", "gif"),
    (b"GIF89a", "gif"),
    (b"BM", "bmp"),
)

# Extensions that name the same format
_FORMAT_ALIASES = {"jpg": "jpeg"}


def sniff_image_type(path: Path) -> Optional[str]:
    """Detect an image format from the first bytes of a file.

    Returns:
        "jpeg", "png", "gif", "bmp", "webp" or None if no signature matches

    Raises:
        OSError: If the file cannot be read
    """
    with path.open("rb") as f:
        header = f.read(16)

    if len(header) >= 12 and header[:4] == b"RIFF" and header[8:12] == b"WEBP":
        return "webp"
    for signature, fmt in _SIGNATURES:
        if header.startswith(signature):
            return fmt
    return None


def file_extension(name: str) -> str:
    """Lowercase extension without the dot, or "" if there is none."""
    _, dot, ext = name.rpartition(".")
    return ext.lower() if dot else ""


def is_supported_image(path: Path, config: SnapshotConfig) -> bool:
    """Check extension and, if enabled, content signature of a file."""
    ext = file_extension(path.name)
    if not ext or ext not in config.extensions:
        return False
    if not config.probe_content:
        return True

    try:
        detected = sniff_image_type(path)
    except OSError as e:
        # Trust the extension when the header cannot be read
        logger.debug("Could not probe content type for %s: %s", path, e)
        return True

    if detected is None:
        logger.debug("Skipping %s: content does not look like an image", path)
        return False
    if _FORMAT_ALIASES.get(ext, ext) != detected:
        logger.debug("%s has extension .%s but contains %s", path, ext, detected)
    return True


def walk_files(root: Path, ignore: Optional[IgnoreSpec] = None):
    """Yield every regular file under root, pruning ignored directories.

    Symlinked directories are not followed.
    """
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        rel_dir = current.relative_to(root)

        if ignore is not None:
            kept = []
            for d in dirnames:
                rel = (rel_dir / d).as_posix()
                if ignore.should_traverse(rel):
                    kept.append(d)
            dirnames[:] = kept

        for name in filenames:
            path = current / name
            if ignore is not None and ignore.is_ignored((rel_dir / name).as_posix()):
                continue
            if path.is_symlink() or not path.is_file():
                continue
            yield path


def enumerate_files(
    root: Path,
    config: Optional[SnapshotConfig] = None,
    ignore: Optional[IgnoreSpec] = None,
) -> List[FileRecord]:
    """Enumerate supported image files under root.

    Args:
        root: Directory to scan (recursively, no depth limit)
        config: Extensions and probing settings, defaults if omitted
        ignore: Exclusion patterns, built from root and config if omitted

    Returns:
        FileRecords sorted by path

    Raises:
        NotADirectoryError: If root is not a directory
    """
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    if config is None:
        config = SnapshotConfig()
    if ignore is None:
        ignore = IgnoreSpec(root, config.ignore)

    records = []
    for path in walk_files(root, ignore):
        if not is_supported_image(path, config):
            continue
        try:
            st = path.stat()
        except OSError as e:
            logger.warning("Failed to read %s: %s", path, e)
            continue
        records.append(FileRecord(
            path=normalize_path(path),
            size=st.st_size,
            mtime=st.st_mtime,
            format=file_extension(path.name),
        ))

    records.sort(key=lambda r: r.path)
    logger.debug("Enumerated %d image files under %s", len(records), root)
    return records


def describe_file(path: Path) -> FileDetails:
    """Collect size, detected format and timestamps of a single file.

    Raises:
        FileNotFoundError: If path is not a regular file
        OSError: If the file cannot be read
    """
    if not path.is_file():
        raise FileNotFoundError(f"Not a file: {path}")

    st = path.stat()
    created, modified = file_timestamps(st)
    detected = sniff_image_type(path)
    return FileDetails(
        path=normalize_path(path),
        size=st.st_size,
        extension=file_extension(path.name),
        format=detected,
        mime_type=f"image/{detected}" if detected else None,
        modified=modified,
        created=created,
    )
