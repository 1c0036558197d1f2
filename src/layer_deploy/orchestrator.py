"""
layer_deploy.orchestrator — Sequential deploy of code plus layers.

Order of operations:
  1. Package the code directory once.
  2. setup_layers: fingerprint, shared artifact/version, per-target layer lists.
  3. For each target, in input order:
       a. update the function (code, and layers when they changed)
       b. emit a best-effort summary to the log sink
       c. persist the new fingerprint, only if the target's layers changed

The first failure aborts the batch.  A target that failed keeps its old
fingerprint, so the next run treats it as changed and retries it.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from aws_lambda_powertools import Logger

from layer_deploy.archive import compress_directory
from layer_deploy.aws.registry import ClientRegistry
from layer_deploy.config import DeployConfig
from layer_deploy.models import DeployResult, LayerPlan, Target
from layer_deploy.protocols import ControlPlane, FingerprintStore, LogSink, ObjectStore, Observer
from layer_deploy.reconciler import setup_layers
from layer_deploy.retry import DEFAULT_PUBLISH_RETRY, RetryPolicy
from layer_deploy.sinks import LoggerLogSink, WebhookLogSink, format_deploy_summary

logger = Logger(service="layer-deploy")


@dataclass(frozen=True)
class DeployDependencies:
    control_plane_for: Callable[[Target], ControlPlane]
    object_store: ObjectStore
    fingerprint_store: FingerprintStore
    log_sink: LogSink | None = None


def build_dependencies(config: DeployConfig, registry: ClientRegistry) -> DeployDependencies:
    """Wire the AWS adapters for config through a shared client registry."""
    log_sink: LogSink = (
        WebhookLogSink(config.webhook_url) if config.webhook_url else LoggerLogSink()
    )
    return DeployDependencies(
        control_plane_for=registry.control_plane_for,
        object_store=registry.object_store(config.storage),
        fingerprint_store=registry.fingerprint_store(
            region=config.region, prefix=config.ssm_prefix
        ),
        log_sink=log_sink,
    )


def _emit(log_sink: LogSink | None, message: str, log: Observer) -> None:
    if log_sink is None:
        return
    try:
        log_sink.emit(message)
    except Exception as exc:  # noqa: BLE001
        log.warning("Log sink failed", extra={"error": str(exc)})


def plan_layers(
    config: DeployConfig,
    deps: DeployDependencies,
    *,
    retry_policy: RetryPolicy = DEFAULT_PUBLISH_RETRY,
    observer: Observer | None = None,
) -> LayerPlan:
    return setup_layers(
        config.targets,
        layer=config.layer,
        storage=config.storage,
        project_version=config.project_version,
        deps_path=config.deps_path,
        object_store=deps.object_store,
        fingerprint_store=deps.fingerprint_store,
        control_plane_for=deps.control_plane_for,
        retry_policy=retry_policy,
        observer=observer,
    )


def deploy(
    config: DeployConfig,
    deps: DeployDependencies,
    *,
    retry_policy: RetryPolicy = DEFAULT_PUBLISH_RETRY,
    observer: Observer | None = None,
) -> list[DeployResult]:
    """Deploy config.dist_path to every target, refreshing layers as needed."""
    log = observer or logger

    log.info("Compressing code directory", extra={"dist_path": str(config.dist_path)})
    code = compress_directory(config.dist_path)
    log.debug("Code archive ready", extra={"bytes": len(code)})

    plan = plan_layers(config, deps, retry_policy=retry_policy, observer=log)

    results: list[DeployResult] = []
    for index, target in enumerate(config.targets):
        layers = plan.layers_for(index)
        log.info("Updating function", extra={"target": target.key, "layers": layers})
        update = deps.control_plane_for(target).update_function(
            target.service, target.function, code, layers
        )
        _emit(deps.log_sink, format_deploy_summary(config.name, target, update), log)

        written = False
        if layers is not None:
            deps.fingerprint_store.set_hash(target.key, plan.fingerprint)
            written = True
            log.info(
                "Fingerprint recorded",
                extra={"target": target.key, "fingerprint": plan.fingerprint},
            )
        results.append(
            DeployResult(target=target, update=update, layers=layers, fingerprint_written=written)
        )
    return results
