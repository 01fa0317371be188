"""Directory statistics aggregated from a single walk."""

from collections import Counter
from pathlib import Path
from typing import Optional
import logging

from .config import SnapshotConfig
from .core import DirectoryStats, FileRecord
from .ignore import IgnoreSpec
from .scanner import file_extension, is_supported_image, walk_files
from .utils import normalize_path

logger = logging.getLogger(__name__)


def compute_stats(root: Path, config: Optional[SnapshotConfig] = None) -> DirectoryStats:
    """Compute statistics for every regular file under root.

    Image counts use the same predicate and ignore rules as enumeration.
    The smallest file excludes empty files. The average uses integer
    division and is 0 for an empty tree.

    Raises:
        NotADirectoryError: If root is not a directory
    """
    if not root.is_dir():
        raise NotADirectoryError(f"Not a directory: {root}")

    if config is None:
        config = SnapshotConfig()
    ignore = IgnoreSpec(root, config.ignore)

    stats = DirectoryStats(root=normalize_path(root))
    extensions: Counter = Counter()

    for path in walk_files(root, ignore):
        try:
            st = path.stat()
        except OSError as e:
            logger.debug("Could not stat %s: %s", path, e)
            continue

        ext = file_extension(path.name)
        record = FileRecord(path=normalize_path(path), size=st.st_size, mtime=st.st_mtime, format=ext or None)

        stats.total_files += 1
        stats.total_size += record.size
        if ext:
            extensions[ext] += 1
        if is_supported_image(path, config):
            stats.image_files += 1

        if record.size == 0:
            stats.empty_files += 1
        elif stats.smallest_file is None or record.size < stats.smallest_file.size:
            stats.smallest_file = record
        if stats.largest_file is None or record.size > stats.largest_file.size:
            stats.largest_file = record
        if stats.newest_file is None or record.mtime > stats.newest_file.mtime:
            stats.newest_file = record
        if stats.oldest_file is None or record.mtime < stats.oldest_file.mtime:
            stats.oldest_file = record

    if stats.total_files:
        stats.average_size = stats.total_size // stats.total_files
    if extensions:
        # Ties go to the alphabetically first extension
        stats.most_common_type = min(extensions, key=lambda ext: (-extensions[ext], ext))
    stats.extensions = sorted(extensions)
    stats.subdirectory_count = sum(
        1 for entry in root.iterdir()
        if entry.is_dir() and not entry.is_symlink() and ignore.should_traverse(entry.name)
    )
    return stats
