"""Tests for owner-only permission hardening."""

import os
import stat
from unittest.mock import patch

import pytest

from imagemeta_snapshot.permissions import restrict_to_owner


posix_only = pytest.mark.skipif(os.name != "posix", reason="POSIX permissions only")


@posix_only
def test_file_mode(tmp_path):
    f = tmp_path / "a.txt"
    f.write_text("x")
    os.chmod(f, 0o666)

    assert restrict_to_owner(f) is True
    assert stat.S_IMODE(f.stat().st_mode) == 0o600


@posix_only
def test_directory_mode(tmp_path):
    d = tmp_path / "dir"
    d.mkdir(mode=0o755)

    assert restrict_to_owner(d) is True
    assert stat.S_IMODE(d.stat().st_mode) == 0o700


def test_failure_is_logged_not_raised(tmp_path, caplog):
    f = tmp_path / "a.txt"
    f.write_text("x")

    with patch("imagemeta_snapshot.permissions.supports_posix_permissions", return_value=True), \
            patch("imagemeta_snapshot.permissions.os.chmod", side_effect=PermissionError("denied")):
        with caplog.at_level("WARNING"):
            assert restrict_to_owner(f) is False

    assert "Could not restrict permissions" in caplog.text


def test_unsupported_platform_is_noop(tmp_path):
    f = tmp_path / "a.txt"
    f.write_text("x")

    with patch("imagemeta_snapshot.permissions.supports_posix_permissions", return_value=False), \
            patch("imagemeta_snapshot.permissions.os.chmod") as chmod:
        assert restrict_to_owner(f) is False

    chmod.assert_not_called()
