"""Unit tests for layer_deploy.archive."""

from __future__ import annotations

import io
import zipfile
from pathlib import Path

import pytest
from layer_deploy.archive import compress_directory, remove_leading_slash, write_archive
from layer_deploy.exceptions import SourceMissingError


def test_compress_directory_contains_relative_paths(deps_dir: Path) -> None:
    data = compress_directory(deps_dir)
    names = zipfile.ZipFile(io.BytesIO(data)).namelist()
    assert names == ["requests.py", "boto3/__init__.py"]


def test_mount_prefix_roots_every_entry(deps_dir: Path) -> None:
    data = compress_directory(deps_dir, mount_prefix="/python/")
    names = zipfile.ZipFile(io.BytesIO(data)).namelist()
    assert names
    assert all(name.startswith("python/") for name in names)


def test_write_archive_returns_file_count(deps_dir: Path, tmp_path: Path) -> None:
    target = tmp_path / "out" / "deps.zip"
    count = write_archive(deps_dir, target, mount_prefix="python")
    assert count == 2
    with zipfile.ZipFile(target) as zf:
        assert "python/boto3/__init__.py" in zf.namelist()


def test_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(SourceMissingError, match="does not exist"):
        compress_directory(tmp_path / "dist")


@pytest.mark.parametrize(
    ("value", "expected"),
    [("/fc-deploy/a.zip", "fc-deploy/a.zip"), ("fc-deploy/a.zip", "fc-deploy/a.zip"), ("", "")],
)
def test_remove_leading_slash(value: str, expected: str) -> None:
    assert remove_leading_slash(value) == expected
