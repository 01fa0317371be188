"""Tests for image file enumeration."""

import os
from pathlib import Path

import pytest

from imagemeta_snapshot.config import SnapshotConfig
from imagemeta_snapshot.scanner import (
    describe_file,
    enumerate_files,
    file_extension,
    is_supported_image,
    sniff_image_type,
)
from imagemeta_snapshot.utils import normalize_path


class TestSniffing:
    """Test content signature detection."""

    @pytest.mark.parametrize("name,expected", [
        ("a.jpg", "jpeg"),
        ("a.jpeg", "jpeg"),
        ("a.png", "png"),
        ("a.gif", "gif"),
        ("a.bmp", "bmp"),
        ("a.webp", "webp"),
    ])
    def test_known_formats(self, write_image, name, expected):
        assert sniff_image_type(write_image(name)) == expected

    def test_text_is_not_an_image(self, write_file):
        assert sniff_image_type(write_file("notes.jpg", "hello")) is None

    def test_empty_file(self, write_file):
        assert sniff_image_type(write_file("empty.png", "")) is None

    def test_extension_helper(self):
        assert file_extension("IMG_0001.JPG") == "jpg"
        assert file_extension("archive.tar.gz") == "gz"
        assert file_extension("README") == ""


class TestSupportedImage:
    """Test the supported-type predicate."""

    def test_extension_case_insensitive(self, write_image):
        path = write_image("photo.JPG")
        assert is_supported_image(path, SnapshotConfig())

    def test_unsupported_extension(self, write_file):
        path = write_file("doc.pdf", "%PDF-1.4")
        assert not is_supported_image(path, SnapshotConfig())

    def test_fake_image_rejected(self, write_file):
        path = write_file("fake.png", "not really a png")
        assert not is_supported_image(path, SnapshotConfig())

    def test_fake_image_accepted_without_probing(self, write_file):
        path = write_file("fake.png", "not really a png")
        assert is_supported_image(path, SnapshotConfig(probe_content=False))

    def test_mismatched_format_still_an_image(self, image_dir, write_image):
        """A PNG saved with a .jpg extension is still an image."""
        png = write_image("real.png")
        mislabeled = image_dir / "mislabeled.jpg"
        png.rename(mislabeled)
        assert is_supported_image(mislabeled, SnapshotConfig())

    def test_unreadable_header_trusts_extension(self, write_image, monkeypatch):
        path = write_image("a.jpg")

        def fail(_):
            raise PermissionError("denied")

        monkeypatch.setattr("imagemeta_snapshot.scanner.sniff_image_type", fail)
        assert is_supported_image(path, SnapshotConfig())

    def test_custom_extensions(self, write_image):
        path = write_image("a.gif")
        config = SnapshotConfig(extensions=[".PNG"])
        assert config.extensions == ["png"]
        assert not is_supported_image(path, config)


class TestEnumerateFiles:
    """Test recursive enumeration."""

    def test_recursive_and_sorted(self, image_dir, write_image, write_file):
        write_image("b.png", 10)
        write_image("a.jpg", 20)
        write_image("deep/er/c.gif", 30)
        write_file("photos/readme.txt", "text")

        records = enumerate_files(image_dir)

        assert [r.path for r in records] == [
            normalize_path(image_dir / "a.jpg"),
            normalize_path(image_dir / "b.png"),
            normalize_path(image_dir / "deep" / "er" / "c.gif"),
        ]
        assert [r.size for r in records] == [20, 10, 30]
        assert records[0].format == "jpg"
        assert records[0].mtime == (image_dir / "a.jpg").stat().st_mtime

    def test_paths_are_absolute(self, image_dir, write_image, monkeypatch):
        write_image("a.jpg")
        monkeypatch.chdir(image_dir.parent)

        records = enumerate_files(Path(image_dir.name))

        assert Path(records[0].path).is_absolute()

    def test_empty_directory(self, image_dir):
        assert enumerate_files(image_dir) == []

    def test_excludes_directories(self, image_dir, write_image):
        (image_dir / "folder.jpg").mkdir()
        write_image("a.jpg")

        records = enumerate_files(image_dir)

        assert [r.name for r in records] == ["a.jpg"]

    def test_default_ignores(self, image_dir, write_image):
        write_image("a.jpg")
        write_image(".thumbnails/a.jpg")
        write_image("@eaDir/a.jpg")

        assert [r.name for r in enumerate_files(image_dir)] == ["a.jpg"]

    def test_ignore_file(self, image_dir, write_image):
        write_image("keep.jpg")
        write_image("raw/skip.png")
        write_image("draft_1.gif")
        (image_dir / ".imagemetaignore").write_text("# exports\nraw/\ndraft_*\n")

        assert [r.name for r in enumerate_files(image_dir)] == ["keep.jpg"]

    def test_config_ignore_patterns(self, image_dir, write_image):
        write_image("keep.jpg")
        write_image("tmp/skip.jpg")

        records = enumerate_files(image_dir, SnapshotConfig(ignore=["tmp/"]))

        assert [r.name for r in records] == ["keep.jpg"]

    @pytest.mark.skipif(os.name != "posix", reason="symlinks need POSIX")
    def test_symlinks_not_followed(self, image_dir, write_image, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "x.jpg").write_bytes(write_image("a.jpg").read_bytes())
        (image_dir / "linked").symlink_to(outside, target_is_directory=True)
        (image_dir / "link.jpg").symlink_to(image_dir / "a.jpg")

        assert [r.name for r in enumerate_files(image_dir)] == ["a.jpg"]

    def test_not_a_directory(self, write_image):
        with pytest.raises(NotADirectoryError):
            enumerate_files(write_image("a.jpg"))

    def test_missing_directory(self, tmp_path):
        with pytest.raises(NotADirectoryError):
            enumerate_files(tmp_path / "missing")


class TestDescribeFile:
    """Test single-file statistics."""

    def test_image(self, write_image):
        path = write_image("sunset.png", 2000)

        details = describe_file(path)

        assert details.path == normalize_path(path)
        assert details.name == "sunset.png"
        assert details.size == 2000
        assert details.extension == "png"
        assert details.format == "png"
        assert details.mime_type == "image/png"
        assert details.modified.timestamp() == pytest.approx(path.stat().st_mtime, abs=1e-5)
        assert details.created.tzinfo is not None

    def test_format_comes_from_content(self, image_dir, write_image):
        mislabeled = image_dir / "photo.jpg"
        write_image("real.png").rename(mislabeled)

        details = describe_file(mislabeled)

        assert details.extension == "jpg"
        assert details.format == "png"

    def test_not_an_image(self, write_file):
        details = describe_file(write_file("notes.txt", "hello"))

        assert details.format is None
        assert details.mime_type is None
        assert details.size == 5

    def test_directory_rejected(self, image_dir):
        with pytest.raises(FileNotFoundError):
            describe_file(image_dir)
