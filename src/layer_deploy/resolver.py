"""
layer_deploy.resolver — Find or publish the layer version for a fingerprint.

A version is reused when the fingerprint embedded in its description (via
the artifact file name "<stem>@<fingerprint>.zip") equals the current one.
The comparison is on the parsed token, not a substring of the whole
description.  No new version is ever published for a fingerprint that an
existing version in the scan window already carries.
"""

from __future__ import annotations

import re

from aws_lambda_powertools import Logger

from layer_deploy.exceptions import InvalidLayerVersion, LayerNotFoundError
from layer_deploy.models import ArtifactLocation, LayerVersionRef, LayerVersionSummary
from layer_deploy.protocols import ControlPlane, Observer
from layer_deploy.retry import DEFAULT_PUBLISH_RETRY, RetryPolicy, retry_call

logger = Logger(service="layer-deploy")

DEFAULT_DESCRIPTION_PREFIX = "layer-deploy dependencies "
# Only the most recent versions are scanned; older ones are assumed superseded.
SCAN_WINDOW = 10

_FINGERPRINT_TOKEN = re.compile(r"@([0-9a-f]+)\.zip\b")


def description_fingerprints(description: str) -> set[str]:
    """Fingerprints embedded in a layer version description."""
    return set(_FINGERPRINT_TOKEN.findall(description or ""))


def build_description(prefix: str | None, artifact: ArtifactLocation) -> str:
    """Join prefix and file name with one space; a blank prefix gives the file name."""
    prefix = (DEFAULT_DESCRIPTION_PREFIX if prefix is None else prefix).rstrip()
    return f"{prefix} {artifact.file_name}" if prefix else artifact.file_name


def find_matching_version(
    versions: list[LayerVersionSummary], fingerprint: str
) -> LayerVersionSummary | None:
    for version in versions[:SCAN_WINDOW]:
        if fingerprint in description_fingerprints(version.description):
            return version
    return None


def _list_versions(
    control_plane: ControlPlane, layer_name: str, log: Observer
) -> list[LayerVersionSummary]:
    try:
        return control_plane.list_layer_versions(layer_name, SCAN_WINDOW)
    except LayerNotFoundError:
        log.info("Layer does not exist yet; publishing first version", extra={"layer": layer_name})
        return []


def resolve_layer_version(
    layer_name: str,
    fingerprint: str,
    artifact: ArtifactLocation,
    compatible_runtimes: list[str],
    description: str | None = None,
    *,
    control_plane: ControlPlane,
    retry_policy: RetryPolicy = DEFAULT_PUBLISH_RETRY,
    observer: Observer | None = None,
) -> LayerVersionRef:
    """Return an existing version carrying fingerprint, or publish a new one.

    Publish is retried up to retry_policy.max_attempts; listing is not.

    Raises:
        ControlPlaneError: listing failed, or every publish attempt failed.
        InvalidLayerVersion: the reused or published version has no reference,
            or publish returned no name.
    """
    log = observer or logger

    existing = find_matching_version(_list_versions(control_plane, layer_name, log), fingerprint)
    if existing is not None:
        if not existing.reference:
            raise InvalidLayerVersion(layer_name=layer_name, missing="layer reference")
        log.info(
            "Reusing layer version",
            extra={"layer": existing.name, "version": existing.version, "fingerprint": fingerprint},
        )
        return LayerVersionRef(
            name=existing.name,
            version=existing.version,
            reference=existing.reference,
            description=existing.description,
        )

    full_description = build_description(description, artifact)
    log.info(
        "Publishing layer version",
        extra={"layer": layer_name, "artifact": artifact.uri, "description": full_description},
    )
    published = retry_call(
        lambda: control_plane.create_layer_version(
            layer_name, full_description, list(compatible_runtimes), artifact
        ),
        retry_policy,
        label="layer create",
        observer=log,
    )

    if not published.name:
        raise InvalidLayerVersion(layer_name=layer_name, missing="layer name")
    if not published.reference:
        raise InvalidLayerVersion(layer_name=layer_name, missing="layer reference")

    log.info(
        "Layer version published",
        extra={
            "layer": published.name,
            "version": published.version,
            "reference": published.reference,
            "code_size": published.code_size,
        },
    )
    return published
