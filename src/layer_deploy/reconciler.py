"""
layer_deploy.reconciler — Bring each target's layer list up to date.

setup_layers is the batch entry point:

  1. Fingerprint the dependency manifests.
  2. Read every target's previously deployed fingerprint.
  3. If all targets already carry the current fingerprint, stop: no
     compression, upload or publish happens and LayerPlan.layers is None.
  4. Otherwise ensure the artifact and resolve the layer version ONCE, then
     reconcile targets one at a time, in input order, reusing that version.

Fingerprint write-back is not done here; the orchestrator persists it only
after a target's function update succeeds.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

from aws_lambda_powertools import Logger

from layer_deploy.artifact import ensure_artifact
from layer_deploy.aws.lambda_control_plane import layer_name_from_arn
from layer_deploy.exceptions import ConfigError
from layer_deploy.fingerprint import compute_fingerprint
from layer_deploy.models import LayerConfig, LayerPlan, LayerVersionRef, StorageConfig, Target
from layer_deploy.protocols import ControlPlane, FingerprintStore, ObjectStore, Observer
from layer_deploy.resolver import resolve_layer_version
from layer_deploy.retry import DEFAULT_PUBLISH_RETRY, RetryPolicy

logger = Logger(service="layer-deploy")

ControlPlaneFactory = Callable[[Target], ControlPlane]


def _refers_to_layer(reference: str, layer_name: str) -> bool:
    name = layer_name_from_arn(reference)
    if name:
        return name == layer_name
    return layer_name in reference


def splice_layer_reference(references: Sequence[str], layer_name: str, reference: str) -> list[str]:
    """Return a copy of references with the managed layer set to reference.

    The first entry for layer_name is replaced in place; if there is none,
    reference is inserted at the front.  Other entries keep their values and
    relative order.  Layer ARNs are compared on their layer-name segment,
    other references by containment.
    """
    spliced = list(references)
    for index, existing in enumerate(spliced):
        if _refers_to_layer(existing, layer_name):
            spliced[index] = reference
            return spliced
    spliced.insert(0, reference)
    return spliced


def reconcile(
    targets: Sequence[Target],
    fingerprint: str,
    layer_version: LayerVersionRef,
    *,
    previous_fingerprints: Sequence[str | None],
    control_plane_for: ControlPlaneFactory,
    observer: Observer | None = None,
) -> list[list[str] | None]:
    """Compute the layer list for each target, order-preserving.

    A target whose previous fingerprint equals fingerprint yields None.
    """
    log = observer or logger
    if len(previous_fingerprints) != len(targets):
        raise ConfigError("previous_fingerprints must have one entry per target")

    results: list[list[str] | None] = []
    for target, previous in zip(targets, previous_fingerprints, strict=True):
        if previous == fingerprint:
            log.info("Fingerprint unchanged; skipping layer update", extra={"target": target.key})
            results.append(None)
            continue

        current = control_plane_for(target).get_function_layers(target.service, target.function)
        log.debug("Current layers", extra={"target": target.key, "layers": current})
        updated = splice_layer_reference(current, layer_version.name, layer_version.reference)
        log.info("Layer list reconciled", extra={"target": target.key, "layers": updated})
        results.append(updated)
    return results


def previous_fingerprints_for(
    targets: Sequence[Target], fingerprint_store: FingerprintStore
) -> list[str | None]:
    return [fingerprint_store.get_hash(target.key) for target in targets]


def setup_layers(
    targets: Sequence[Target],
    *,
    layer: LayerConfig,
    storage: StorageConfig,
    project_version: str | None,
    deps_path: str | Path,
    object_store: ObjectStore,
    fingerprint_store: FingerprintStore | None,
    control_plane_for: ControlPlaneFactory,
    retry_policy: RetryPolicy = DEFAULT_PUBLISH_RETRY,
    observer: Observer | None = None,
) -> LayerPlan:
    """Fingerprint, then build/resolve the layer once and reconcile all targets.

    Raises:
        ConfigError: no fingerprint store, or no targets.
        ManifestReadError / SourceMissingError / StorageError /
        ControlPlaneError / InvalidLayerVersion: propagated unchanged.
    """
    log = observer or logger
    if fingerprint_store is None:
        raise ConfigError("A fingerprint store (get_hash/set_hash) is required")
    if not targets:
        raise ConfigError("At least one deployment target is required")

    fingerprint = compute_fingerprint(layer.manifest_paths, project_version)
    log.info("Current dependency fingerprint", extra={"fingerprint": fingerprint})

    previous = previous_fingerprints_for(targets, fingerprint_store)
    log.debug("Previous fingerprints", extra={"fingerprints": previous})
    if all(p == fingerprint for p in previous):
        log.info("No dependency changes for any target; layer update not needed")
        return LayerPlan(fingerprint=fingerprint, layers=None)

    artifact = ensure_artifact(
        layer.layer_name,
        fingerprint,
        deps_path,
        store=object_store,
        sub_dir=storage.sub_dir,
        mount_prefix=layer.mount_prefix,
        archive_stem=layer.archive_stem,
        upload_timeout=storage.upload_timeout_seconds,
        observer=log,
    )

    first_changed = next(t for t, p in zip(targets, previous, strict=True) if p != fingerprint)
    layer_version = resolve_layer_version(
        layer.layer_name,
        fingerprint,
        artifact,
        list(layer.compatible_runtimes),
        layer.description,
        control_plane=control_plane_for(first_changed),
        retry_policy=retry_policy,
        observer=log,
    )

    layers = reconcile(
        targets,
        fingerprint,
        layer_version,
        previous_fingerprints=previous,
        control_plane_for=control_plane_for,
        observer=log,
    )
    return LayerPlan(fingerprint=fingerprint, layers=tuple(layers))
