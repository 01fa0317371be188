"""Diff computation logic - stable module for computing differences."""

from typing import Mapping, Optional, Set

from .core import ComparisonResult


def _find_rename_target(
    old_path: str,
    size: int,
    previous: Mapping[str, int],
    current: Mapping[str, int],
    consumed: Set[str],
) -> Optional[str]:
    """Find a current path that looks like old_path under a new name.

    A candidate must be new (absent from previous), have the same size and
    not already be claimed by another missing path.
    """
    for path in sorted(current):
        if path == old_path or path in consumed or path in previous:
            continue
        if current[path] == size:
            return path
    return None


def compute_diff(
    previous: Mapping[str, int],
    current: Mapping[str, int],
) -> ComparisonResult:
    """
    Compute differences between a snapshot and the current file sizes.

    Args:
        previous: path -> size from the stored snapshot.
        current: path -> size from a fresh enumeration.

    Returns:
        ComparisonResult with new, modified and deleted paths.

    Note:
        Rename inference is size-based only. A missing file whose size
        matches a new file is reported as that new file being modified.
        Two unrelated files of equal size can therefore be paired.
    """
    new_candidates = []
    modified = []
    deleted = []
    renames = {}
    consumed: Set[str] = set()

    for path in sorted(set(previous) | set(current)):
        prev_size = previous.get(path)
        curr_size = current.get(path)

        # Current only
        if prev_size is None:
            new_candidates.append(path)

        # Snapshot only - deleted unless renamed
        elif curr_size is None:
            target = _find_rename_target(path, prev_size, previous, current, consumed)
            if target is None:
                deleted.append(path)
            else:
                consumed.add(target)
                modified.append(target)
                renames[path] = target

        # Both exist
        elif prev_size != curr_size:
            modified.append(path)

    # Rename targets are never reported as new
    new = [path for path in new_candidates if path not in consumed]

    return ComparisonResult(
        new=new,
        modified=modified,
        deleted=deleted,
        renames=renames,
    )
