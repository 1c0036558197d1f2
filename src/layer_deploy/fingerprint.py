"""
layer_deploy.fingerprint — Content fingerprint of the dependency manifests.

Hash algorithm:
    - Sort manifest paths lexicographically
    - Read each file's full text, normalise CRLF to LF (a lone CR is kept)
    - Join [project_version, content_1, ..., content_n] with a single newline
    - MD5 hex digest (32 chars)

MD5 guards against accidental drift, not tampering; collision resistance is
not a requirement.  Same files in any order produce the same fingerprint.
"""

from __future__ import annotations

import hashlib
import tomllib
from collections.abc import Iterable
from pathlib import Path

from layer_deploy.exceptions import ConfigError, ManifestReadError

FINGERPRINT_LENGTH = 32


def _read_manifest(path: str) -> str:
    try:
        with open(path, encoding="utf-8", newline="") as fh:
            content = fh.read()
    except FileNotFoundError as exc:
        raise ManifestReadError(path, "file not found") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestReadError(path, str(exc)) from exc
    return content.replace("\r\n", "\n")


def compute_fingerprint(manifest_paths: Iterable[str | Path], project_version: str | None) -> str:
    """Return the fingerprint of the manifests plus the project version.

    Raises:
        ConfigError: project_version is None or blank.
        ManifestReadError: any manifest is missing or unreadable.
    """
    if project_version is None or not str(project_version).strip():
        raise ConfigError("Project version could not be determined")

    contents = [_read_manifest(p) for p in sorted(str(p) for p in manifest_paths)]
    combined = "\n".join([str(project_version), *contents])
    return hashlib.md5(combined.encode("utf-8"), usedforsecurity=False).hexdigest()


def read_project_version(pyproject_path: str | Path) -> str:
    """Read [project].version from a pyproject.toml.

    Raises:
        ConfigError: the file is missing or declares no version.
    """
    path = Path(pyproject_path)
    if not path.exists():
        raise ConfigError(f"pyproject.toml not found: {path}")
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    version = data.get("project", {}).get("version")
    if not isinstance(version, str) or not version.strip():
        raise ConfigError(f"[project].version is not set in {path}")
    return version.strip()
