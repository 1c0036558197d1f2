"""
layer_deploy.archive — Zip packaging of code and dependency directories.

Entries are written in sorted path order so the same tree produces the same
member list.  An optional mount prefix roots every entry under a fixed path
inside the archive (e.g. "python/" for a Lambda Python layer).
"""

from __future__ import annotations

import io
import os
import zipfile
from pathlib import Path
from typing import BinaryIO

from layer_deploy.exceptions import SourceMissingError


def remove_leading_slash(value: str) -> str:
    """Strip one leading "/" (object keys and archive names must be relative)."""
    return value[1:] if value.startswith("/") else value


def _iter_files(root: Path) -> list[Path]:
    files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        for name in sorted(filenames):
            files.append(Path(dirpath) / name)
    return files


def _write_zip(directory: Path, fh: BinaryIO, mount_prefix: str) -> int:
    prefix = remove_leading_slash(mount_prefix).strip("/")
    count = 0
    with zipfile.ZipFile(fh, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for path in _iter_files(directory):
            relative = path.relative_to(directory).as_posix()
            arcname = f"{prefix}/{relative}" if prefix else relative
            zf.write(path, arcname)
            count += 1
    return count


def _require_directory(directory: str | Path) -> Path:
    path = Path(directory)
    if not path.is_dir():
        raise SourceMissingError(str(path))
    return path


def compress_directory(directory: str | Path, mount_prefix: str = "") -> bytes:
    """Zip a directory in memory and return the archive bytes."""
    root = _require_directory(directory)
    buffer = io.BytesIO()
    _write_zip(root, buffer, mount_prefix)
    return buffer.getvalue()


def write_archive(directory: str | Path, target_path: str | Path, mount_prefix: str = "") -> int:
    """Zip a directory to target_path.  Returns the number of files written."""
    root = _require_directory(directory)
    target = Path(target_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("wb") as fh:
        return _write_zip(root, fh, mount_prefix)
