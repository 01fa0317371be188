"""On-disk snapshot storage with integrity verification.

Layout (relative to the store root):

    snapshots/<key>_snapshot_<YYYYMMDD_HHMMSS>.txt
    snapshot_metadata/<key>_snapshot_<YYYYMMDD_HHMMSS>.txt.metadata
    snapshots/.<key>.lock

Saving a snapshot removes every earlier snapshot for the same key, so at most
one snapshot per key exists once a save returns. Loading verifies the
snapshot against the digest in its metadata file before any line is parsed.
"""

import hashlib
import logging
import os
import re
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

import portalocker

from .config import SnapshotConfig
from .constants import (
    FILE_COUNT_KEY,
    FILE_SIZE_KEY,
    HASH_KEY,
    METADATA_SUFFIX,
    SNAPSHOT_INFIX,
    SNAPSHOT_SUFFIX,
    TIMESTAMP_KEY,
    TIMESTAMP_PATTERN,
)
from .core import ComparisonResult, FileRecord, SnapshotInfo, SnapshotMetadata
from .diffing import compute_diff
from .errors import IntegrityViolationError
from .hashing import compute_snapshot_digest
from .permissions import restrict_to_owner
from .utils import get_timestamp, normalize_path

logger = logging.getLogger(__name__)


# ============= Atomic Write Helpers =============

def _atomic_write_text(path: Path, text: str, errors: str = "strict") -> None:
    """Atomically write text to file with crash safety.

    1. Writes to temp file with fsync to ensure content is on disk
    2. Atomic rename to target path (appears all-at-once)
    3. Fsync parent directory to ensure rename is durable

    Directory fsync is best-effort (not supported on Windows). On any failure
    the temp file is removed and the target is left untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    tmp = None
    try:
        # Temp name starts with a dot so it never matches a snapshot pattern
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            errors=errors,
            newline="\n",
            delete=False,
            dir=path.parent,
            prefix=f".{path.name}.tmp-",
            suffix=""
        ) as f:
            tmp = Path(f.name)
            f.write(text)
            f.flush()
            os.fsync(f.fileno())

        os.replace(tmp, path)

        try:
            flags = os.O_RDONLY
            if hasattr(os, "O_DIRECTORY"):
                flags |= os.O_DIRECTORY

            dirfd = os.open(str(path.parent), flags)
            try:
                os.fsync(dirfd)
            finally:
                os.close(dirfd)
        except OSError:
            logger.debug("Directory fsync not supported for %s", path.parent)
    except BaseException:
        if tmp is not None:
            tmp.unlink(missing_ok=True)
        raise


def _parse_metadata(text: str) -> Dict[str, str]:
    """Parse KEY:value lines. Unknown keys are kept, blank lines skipped."""
    fields = {}
    for line in text.splitlines():
        key, sep, value = line.partition(":")
        if sep:
            fields[key.strip()] = value.strip()
    return fields


class SnapshotStore:
    """Persists one verified snapshot per target key.

    Construct one store per process (or per target) and pass it to whatever
    needs it. Stores sharing a root coordinate through per-key lock files.
    """

    def __init__(self, root: Optional[Path] = None, config: Optional[SnapshotConfig] = None):
        """Create storage directories under root with owner-only permissions.

        Args:
            root: Base directory for snapshot storage (default: CWD)
            config: Storage settings (default: SnapshotConfig())
        """
        self.root = Path(root) if root is not None else Path.cwd()
        self.config = config or SnapshotConfig()
        self.snapshot_dir = self.root / self.config.snapshot_dir
        self.metadata_dir = self.root / self.config.metadata_dir

        self.snapshot_dir.mkdir(parents=True, exist_ok=True)
        self.metadata_dir.mkdir(parents=True, exist_ok=True)
        restrict_to_owner(self.snapshot_dir)
        restrict_to_owner(self.metadata_dir)
        logger.debug("Initialized snapshot directories under %s", self.root)

    # ============= Identity =============

    def target_key(self, directory: Path) -> str:
        """Get the key under which snapshots of directory are stored.

        With identity "name" this is the directory base name, so two
        directories with the same name share one snapshot slot. With
        identity "path" a short hash of the absolute path is appended.
        """
        absolute = normalize_path(directory)
        name = Path(absolute).name or "unknown"
        if self.config.identity == "path":
            path_hash = hashlib.sha256(absolute.encode("utf-8")).hexdigest()[:12]
            return f"{name}-{path_hash}"
        return name

    def _check_target(self, target_name: str) -> None:
        if not target_name or "/" in target_name or "\\" in target_name or target_name in (".", ".."):
            raise ValueError(f"Invalid target name: {target_name!r}")

    # ============= Paths =============

    def _pattern(self, target_name: str) -> "re.Pattern[str]":
        return re.compile(
            re.escape(target_name + SNAPSHOT_INFIX)
            + TIMESTAMP_PATTERN
            + re.escape(SNAPSHOT_SUFFIX)
        )

    def _matching(self, directory: Path, target_name: str, suffix: str = "") -> List[Path]:
        """List files in directory named like a snapshot of target_name (plus suffix)."""
        pattern = self._pattern(target_name)
        matches = []
        for entry in directory.iterdir():
            name = entry.name
            if suffix:
                if not name.endswith(suffix):
                    continue
                name = name[:-len(suffix)]
            if pattern.fullmatch(name) and entry.is_file():
                matches.append(entry)
        return sorted(matches)

    def metadata_path(self, snapshot_path: Path) -> Path:
        """Get the metadata file paired with a snapshot file."""
        return self.metadata_dir / (snapshot_path.name + METADATA_SUFFIX)

    def snapshot_paths(self, target_name: str) -> List[Path]:
        """Get all snapshot files stored for target_name."""
        self._check_target(target_name)
        return self._matching(self.snapshot_dir, target_name)

    def latest_snapshot(self, target_name: str) -> Optional[Path]:
        """Get the most recently modified snapshot for target_name.

        Ties on mtime are broken by filename.
        """
        candidates = self.snapshot_paths(target_name)
        if not candidates:
            return None
        return max(candidates, key=lambda p: (p.stat().st_mtime_ns, p.name))

    @contextmanager
    def _locked(self, target_name: str) -> Iterator[None]:
        lock_path = self.snapshot_dir / f".{target_name}.lock"
        with portalocker.Lock(str(lock_path), "w", timeout=self.config.lock_timeout):
            yield

    # ============= Save =============

    def _delete_existing(self, target_name: str, keep: Optional[Path] = None) -> int:
        """Delete snapshot and metadata files for target_name.

        The snapshot keep and its metadata file are left in place.
        """
        kept = set()
        if keep is not None:
            kept = {keep, self.metadata_path(keep)}

        removed = 0
        stale = self._matching(self.snapshot_dir, target_name)
        stale += self._matching(self.metadata_dir, target_name, METADATA_SUFFIX)
        for path in stale:
            if path in kept:
                continue
            path.unlink(missing_ok=True)
            removed += 1
            logger.debug("Removed old snapshot file: %s", path)
        return removed

    def save(self, target_name: str, records: Iterable[FileRecord]) -> Path:
        """Save a new snapshot for target_name, replacing any earlier one.

        Args:
            target_name: Snapshot key (see target_key)
            records: Current files; may be empty

        Returns:
            Path of the new snapshot file

        Earlier snapshots are deleted only after the new snapshot and its
        metadata are committed, so a failed save keeps the previous baseline.
        A save within the same second as the previous one reuses its filename
        and replaces it in place.

        Raises:
            OSError: If the snapshot or metadata cannot be written
        """
        self._check_target(target_name)

        data: Dict[str, int] = {}
        for record in records:
            path = normalize_path(record.path)
            if "\n" in path or "\r" in path:
                logger.warning("Skipping path with line break: %r", path)
                continue
            data.setdefault(path, record.size)

        if not data:
            logger.warning("Saving empty snapshot for %s", target_name)

        timestamp = get_timestamp()
        filename = f"{target_name}{SNAPSHOT_INFIX}{timestamp}{SNAPSHOT_SUFFIX}"
        snapshot_file = self.snapshot_dir / filename
        metadata_file = self.metadata_path(snapshot_file)

        with self._locked(target_name):
            # Undecodable file names are kept as surrogate escapes
            _atomic_write_text(
                snapshot_file,
                "".join(f"{path}={size}\n" for path, size in data.items()),
                errors="surrogateescape",
            )

            try:
                # Digest covers the committed file's own timestamps
                digest = compute_snapshot_digest(snapshot_file)
                metadata = SnapshotMetadata(
                    hash=digest,
                    timestamp=timestamp,
                    file_size=snapshot_file.stat().st_size,
                    file_count=len(data),
                )
                _atomic_write_text(metadata_file, "".join(
                    f"{key}:{value}\n" for key, value in (
                        (HASH_KEY, metadata.hash),
                        (TIMESTAMP_KEY, metadata.timestamp),
                        (FILE_SIZE_KEY, metadata.file_size),
                        (FILE_COUNT_KEY, metadata.file_count),
                    )
                ))
            except BaseException:
                # A snapshot without matching metadata would read as tampered
                snapshot_file.unlink(missing_ok=True)
                metadata_file.unlink(missing_ok=True)
                raise

            self._delete_existing(target_name, keep=snapshot_file)
            restrict_to_owner(snapshot_file)
            restrict_to_owner(metadata_file)

        logger.info("Snapshot saved: %s (%d files)", filename, len(data))
        return snapshot_file

    # ============= Verify / Load =============

    def verify(self, snapshot_path: Path) -> SnapshotMetadata:
        """Verify a snapshot file against its metadata.

        Returns:
            The stored metadata

        Raises:
            IntegrityViolationError: If metadata is missing, incomplete or the
                digest does not match
            OSError: If either file cannot be read
        """
        metadata_file = self.metadata_path(snapshot_path)
        if not metadata_file.exists():
            logger.warning("Metadata file missing: %s", metadata_file)
            raise IntegrityViolationError(snapshot_path, "metadata file missing")

        fields = _parse_metadata(metadata_file.read_text(encoding="utf-8"))
        stored_hash = fields.get(HASH_KEY)
        if not stored_hash:
            logger.warning("No hash found in metadata: %s", metadata_file)
            raise IntegrityViolationError(snapshot_path, "no hash in metadata")

        actual = compute_snapshot_digest(snapshot_path)
        if stored_hash.lower() != actual:
            raise IntegrityViolationError(
                snapshot_path, "digest mismatch", expected=stored_hash, actual=actual
            )

        try:
            file_size = int(fields.get(FILE_SIZE_KEY, snapshot_path.stat().st_size))
            file_count = int(fields[FILE_COUNT_KEY]) if FILE_COUNT_KEY in fields else None
        except ValueError:
            raise IntegrityViolationError(snapshot_path, "malformed metadata")

        return SnapshotMetadata(
            hash=stored_hash.lower(),
            timestamp=fields.get(TIMESTAMP_KEY, ""),
            file_size=file_size,
            file_count=file_count,
        )

    def _parse_snapshot(self, snapshot_path: Path) -> Dict[str, int]:
        data = {}
        text = snapshot_path.read_text(encoding="utf-8", errors="surrogateescape")
        for lineno, line in enumerate(text.splitlines(), start=1):
            if not line.strip():
                continue
            path, sep, size_text = line.rpartition("=")
            if not sep or not path:
                logger.warning("Skipping malformed line %d in %s: %r", lineno, snapshot_path.name, line)
                continue
            try:
                size = int(size_text.strip())
            except ValueError:
                logger.warning("Invalid size in snapshot line %d: %r", lineno, line)
                continue
            if size < 0:
                logger.warning("Negative size in snapshot line %d: %r", lineno, line)
                continue
            data[normalize_path(path)] = size
        return data

    def load_latest(self, target_name: str) -> Optional[Dict[str, int]]:
        """Load and verify the latest snapshot for target_name.

        Returns:
            path -> size mapping, or None if no snapshot exists

        Raises:
            IntegrityViolationError: If the snapshot fails verification
            OSError: If the snapshot cannot be read
        """
        self._check_target(target_name)
        with self._locked(target_name):
            latest = self.latest_snapshot(target_name)
            if latest is None:
                return None
            self.verify(latest)
            return self._parse_snapshot(latest)

    def info(self, target_name: str) -> Optional[SnapshotInfo]:
        """Describe the latest snapshot for target_name without parsing entries.

        Verification failures are reported in the result, not raised.
        """
        self._check_target(target_name)
        with self._locked(target_name):
            latest = self.latest_snapshot(target_name)
            if latest is None:
                return None
            try:
                metadata = self.verify(latest)
            except IntegrityViolationError as e:
                return SnapshotInfo(
                    snapshot_path=str(latest),
                    verified=False,
                    problem=e.reason,
                )
            return SnapshotInfo(snapshot_path=str(latest), metadata=metadata, verified=True)

    # ============= Compare =============

    def compare(self, target_name: str, records: Iterable[FileRecord]) -> Optional[ComparisonResult]:
        """Compare the latest snapshot for target_name with current records.

        Returns:
            ComparisonResult, or None if there is no snapshot to compare with

        Raises:
            IntegrityViolationError: If the snapshot fails verification
            OSError: If the snapshot cannot be read
        """
        previous = self.load_latest(target_name)
        if previous is None:
            logger.warning("No previous snapshot found for %s", target_name)
            return None

        current: Dict[str, int] = {}
        for record in records:
            current.setdefault(normalize_path(record.path), record.size)

        result = compute_diff(previous, current)
        logger.info(
            "Snapshot comparison: %d new, %d modified, %d deleted",
            len(result.new), len(result.modified), len(result.deleted),
        )
        return result
