"""
layer_deploy.protocols — Collaborator contracts the engine depends on.

The core never imports boto3 directly; it calls these protocols.  The AWS
adapters in layer_deploy.aws satisfy them, and tests substitute in-memory
fakes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from layer_deploy.models import (
    ArtifactLocation,
    FunctionUpdateResult,
    LayerVersionRef,
    LayerVersionSummary,
)


@runtime_checkable
class Observer(Protocol):
    """Leveled progress logger threaded through every component.

    aws_lambda_powertools.Logger and logging.Logger both satisfy it.
    """

    def debug(self, msg: Any, *args: Any, **kwargs: Any) -> Any: ...

    def info(self, msg: Any, *args: Any, **kwargs: Any) -> Any: ...

    def warning(self, msg: Any, *args: Any, **kwargs: Any) -> Any: ...

    def error(self, msg: Any, *args: Any, **kwargs: Any) -> Any: ...


@runtime_checkable
class ControlPlane(Protocol):
    """Remote compute control plane (functions and layer versions)."""

    def get_function_layers(self, service: str, function: str) -> list[str]:
        """Return the function's current layer references, in order."""
        ...

    def list_layer_versions(self, layer_name: str, max_items: int) -> list[LayerVersionSummary]:
        """List recent versions of a layer, most recent first.

        Raises:
            LayerNotFoundError: the layer has never been published.
            ControlPlaneError: any other remote failure.
        """
        ...

    def create_layer_version(
        self,
        layer_name: str,
        description: str,
        compatible_runtimes: list[str],
        artifact: ArtifactLocation,
    ) -> LayerVersionRef: ...

    def update_function(
        self,
        service: str,
        function: str,
        code: bytes,
        layer_refs: list[str] | None = None,
    ) -> FunctionUpdateResult: ...


@runtime_checkable
class ObjectStore(Protocol):
    """Object store holding layer bundles."""

    bucket: str

    def exists(self, object_key: str) -> bool:
        """True if the object exists.

        Raises:
            StorageError: for every failure other than "not found".
        """
        ...

    def put(self, object_key: str, local_path: Path, timeout: int) -> str:
        """Upload a local file and return its URL."""
        ...


@runtime_checkable
class FingerprintStore(Protocol):
    """Persistence of the last deployed fingerprint per target."""

    def get_hash(self, target_key: str) -> str | None: ...

    def set_hash(self, target_key: str, fingerprint: str) -> None: ...


@runtime_checkable
class LogSink(Protocol):
    """Best-effort progress sink invoked after each target update."""

    def emit(self, message: str) -> None: ...
