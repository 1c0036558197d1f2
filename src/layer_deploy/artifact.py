"""
layer_deploy.artifact — Ensure the dependency bundle for a fingerprint exists.

Compressing and uploading the dependency tree is the dominant cost of a
deploy, so the object store is checked first and the bundle is only built
when no object exists at the content-addressed key:

    [<sub_dir>/]fc-deploy/<layer_name>/<stem>@<fingerprint>.zip

Upload failures raise StorageError and are not retried here.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from aws_lambda_powertools import Logger

from layer_deploy.archive import remove_leading_slash, write_archive
from layer_deploy.exceptions import SourceMissingError
from layer_deploy.models import (
    ARTIFACT_ROOT,
    DEFAULT_ARCHIVE_STEM,
    DEFAULT_MOUNT_PREFIX,
    MIN_UPLOAD_TIMEOUT_SECONDS,
    ArtifactLocation,
)
from layer_deploy.protocols import ObjectStore, Observer

logger = Logger(service="layer-deploy")


def artifact_file_name(fingerprint: str, archive_stem: str = DEFAULT_ARCHIVE_STEM) -> str:
    return f"{archive_stem}@{fingerprint}.zip"


def artifact_key(
    layer_name: str,
    fingerprint: str,
    *,
    archive_stem: str = DEFAULT_ARCHIVE_STEM,
    sub_dir: str | None = None,
) -> str:
    """Deterministic object key for a (layer_name, fingerprint) pair."""
    parts = [ARTIFACT_ROOT, layer_name, artifact_file_name(fingerprint, archive_stem)]
    if sub_dir and sub_dir.strip("/"):
        parts.insert(0, sub_dir.strip("/"))
    return remove_leading_slash("/".join(parts))


def ensure_artifact(
    layer_name: str,
    fingerprint: str,
    source_dir: str | Path,
    *,
    store: ObjectStore,
    sub_dir: str | None = None,
    mount_prefix: str = DEFAULT_MOUNT_PREFIX,
    archive_stem: str = DEFAULT_ARCHIVE_STEM,
    upload_timeout: int = MIN_UPLOAD_TIMEOUT_SECONDS,
    observer: Observer | None = None,
) -> ArtifactLocation:
    """Return the artifact location for fingerprint, uploading it if absent.

    Raises:
        SourceMissingError: source_dir does not exist.
        StorageError: the existence check or the upload failed.
    """
    log = observer or logger
    source = Path(source_dir)
    if not source.is_dir():
        raise SourceMissingError(str(source))

    file_name = artifact_file_name(fingerprint, archive_stem)
    object_key = artifact_key(layer_name, fingerprint, archive_stem=archive_stem, sub_dir=sub_dir)
    location = ArtifactLocation(bucket=store.bucket, object_key=object_key, file_name=file_name)

    if store.exists(object_key):
        log.info("Layer artifact already exists", extra={"object_key": object_key})
        return location

    timeout = max(upload_timeout, MIN_UPLOAD_TIMEOUT_SECONDS)
    with tempfile.TemporaryDirectory(prefix="layer-deploy-") as work_dir:
        archive_path = Path(work_dir) / file_name
        log.info(
            "Compressing dependency directory",
            extra={"source_dir": str(source), "mount_prefix": mount_prefix},
        )
        file_count = write_archive(source, archive_path, mount_prefix)
        log.debug(
            "Compression complete",
            extra={"files": file_count, "bytes": archive_path.stat().st_size},
        )
        url = store.put(object_key, archive_path, timeout)

    log.info("Layer artifact uploaded", extra={"object_key": object_key, "url": url})
    return location
