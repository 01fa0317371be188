"""Shared test fixtures and utilities."""

from pathlib import Path
import pytest

from imagemeta_snapshot.core import FileRecord
from imagemeta_snapshot.store import SnapshotStore
from imagemeta_snapshot.utils import normalize_path


# Minimal leading bytes for each format the scanner recognises
IMAGE_HEADERS = {
    "jpg": b"\xff\xd8\xff\xe0\x00\x10JFIF\x00",
    "jpeg": b"\xff\xd8\xff\xe1\x00\x10Exif\x00",
    "png": b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR",
    "gif": b"GIF89a\x01\x00\x01\x00",
    "bmp": b"BM\x36\x00\x00\x00\x00\x00",
    "webp": b"RIFF\x24\x00\x00\x00WEBPVP8 ",
}


@pytest.fixture
def store_root(tmp_path, monkeypatch):
    """Isolated store root; also the CWD so default paths land in tmp."""
    root = tmp_path / "store"
    root.mkdir()
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def store(store_root):
    """SnapshotStore rooted in a temporary directory."""
    return SnapshotStore(store_root)


@pytest.fixture
def image_dir(tmp_path):
    """Directory that holds test images."""
    d = tmp_path / "photos"
    d.mkdir()
    return d


@pytest.fixture
def write_image(image_dir):
    """Factory fixture to write an image with a valid header.

    The file is padded to ``size`` bytes (at least the header length).
    """
    def _write(path: str, size: int = 100) -> Path:
        file_path = image_dir / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        ext = file_path.suffix.lower().lstrip(".")
        header = IMAGE_HEADERS.get(ext, b"")
        file_path.write_bytes(header + b"\x00" * max(0, size - len(header)))
        return file_path
    return _write


@pytest.fixture
def write_file(tmp_path):
    """Factory fixture to write arbitrary files relative to tmp_path."""
    def _write(path: str, content: str = "test content") -> Path:
        file_path = tmp_path / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)
        return file_path
    return _write


@pytest.fixture
def make_records():
    """Factory fixture to build FileRecords from a path -> size mapping."""
    def _make(mapping):
        return [FileRecord(path=normalize_path(p), size=s) for p, s in mapping.items()]
    return _make
