"""Tests for directory statistics."""

import os

import pytest

from imagemeta_snapshot.config import SnapshotConfig
from imagemeta_snapshot.stats import compute_stats


def test_empty_directory(image_dir):
    stats = compute_stats(image_dir)

    assert stats.total_files == 0
    assert stats.image_files == 0
    assert stats.total_size == 0
    assert stats.average_size == 0
    assert stats.largest_file is None
    assert stats.smallest_file is None
    assert stats.most_common_type == "unknown"
    assert stats.extensions == []
    assert stats.subdirectory_count == 0


def test_counts_and_sizes(image_dir, write_image):
    write_image("a.jpg", 100)
    write_image("b.jpg", 300)
    write_image("c.png", 200)
    (image_dir / "notes.txt").write_text("x" * 50)
    (image_dir / "empty.gif").write_bytes(b"")

    stats = compute_stats(image_dir)

    assert stats.total_files == 5
    assert stats.image_files == 3  # empty.gif has no image signature
    assert stats.total_size == 650
    assert stats.average_size == 130
    assert stats.largest_file.name == "b.jpg"
    assert stats.smallest_file.name == "notes.txt"
    assert stats.empty_files == 1
    assert stats.most_common_type == "jpg"
    assert stats.extensions == ["gif", "jpg", "png", "txt"]


def test_average_is_integer_division(image_dir):
    (image_dir / "a.bin").write_bytes(b"x" * 10)
    (image_dir / "b.bin").write_bytes(b"x" * 11)

    assert compute_stats(image_dir).average_size == 10


def test_most_common_type_tie_is_alphabetical(image_dir, write_image):
    write_image("a.png")
    write_image("b.jpg")

    assert compute_stats(image_dir).most_common_type == "jpg"


def test_files_without_extension(image_dir):
    (image_dir / "README").write_text("hello")

    stats = compute_stats(image_dir)

    assert stats.total_files == 1
    assert stats.most_common_type == "unknown"
    assert stats.extensions == []


def test_newest_and_oldest(image_dir, write_image):
    old = write_image("old.jpg")
    mid = write_image("mid.jpg")
    new = write_image("new.jpg")
    os.utime(old, (1_000_000, 1_000_000))
    os.utime(mid, (2_000_000, 2_000_000))
    os.utime(new, (3_000_000, 3_000_000))

    stats = compute_stats(image_dir)

    assert stats.oldest_file.name == "old.jpg"
    assert stats.newest_file.name == "new.jpg"


def test_recursive_and_subdirectories(image_dir, write_image):
    write_image("2023/a.jpg")
    write_image("2024/summer/b.jpg")
    write_image(".thumbnails/c.jpg")

    stats = compute_stats(image_dir)

    assert stats.total_files == 2
    assert stats.subdirectory_count == 2  # direct children only, ignored dirs excluded


def test_custom_extensions(image_dir, write_image):
    write_image("a.jpg")
    write_image("b.png")

    stats = compute_stats(image_dir, SnapshotConfig(extensions=["png"]))

    assert stats.total_files == 2
    assert stats.image_files == 1


def test_summary(image_dir, write_image):
    write_image("a.jpg", 1024)
    assert compute_stats(image_dir).summary() == "1 images of 1 files (1.0 KB)"


def test_not_a_directory(write_image):
    with pytest.raises(NotADirectoryError):
        compute_stats(write_image("a.jpg"))
