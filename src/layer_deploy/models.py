"""
layer_deploy.models — Value types shared by the reconciliation engine.

Every type here is an immutable dataclass.  Remote resources (layer versions,
function update results) are plain snapshots of what the control plane
returned; the engine never mutates them.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Object-store root for layer bundles: <root>/<layer_name>/<stem>@<fp>.zip
ARTIFACT_ROOT: str = "fc-deploy"
DEFAULT_ARCHIVE_STEM: str = "deps"
DEFAULT_MOUNT_PREFIX: str = "python"
MIN_UPLOAD_TIMEOUT_SECONDS: int = 5 * 60  # 5 minutes


# ---------------------------------------------------------------------------
# Deployment targets
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Target:
    """One deployable function, addressed by a (service, function) pair.

    region/endpoint_url/credentials are optional; unset values fall through
    to the deploy-wide defaults and then to boto3's default chain.
    """

    service: str
    function: str
    region: str | None = None
    endpoint_url: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = field(default=None, repr=False)

    @property
    def key(self) -> str:
        """Key under which this target's last fingerprint is persisted."""
        return f"{self.service}-{self.function}"


# ---------------------------------------------------------------------------
# Layer artifact and versions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ArtifactLocation:
    bucket: str
    object_key: str
    file_name: str

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.object_key}"


@dataclass(frozen=True)
class LayerVersionSummary:
    """One entry of a layer version listing."""

    name: str
    version: int
    description: str
    reference: str


@dataclass(frozen=True)
class LayerVersionRef:
    """A published (or reused) layer version that targets can attach."""

    name: str
    version: int
    reference: str
    description: str = ""
    code_size: int | None = None


# ---------------------------------------------------------------------------
# Function updates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FunctionUpdateResult:
    status_code: int
    code_size: int | None = None
    cpu: str | None = None  # Lambda reports architectures rather than a CPU count
    memory: int | None = None  # MB


# ---------------------------------------------------------------------------
# Batch results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LayerPlan:
    """Outcome of layer setup for a whole batch of targets.

    layers is None when no target needed layer work at all.  Otherwise it
    holds one entry per target, in input order: None for "no change" or the
    reconciled layer reference list to apply.
    """

    fingerprint: str
    layers: tuple[list[str] | None, ...] | None = None

    @property
    def changed(self) -> bool:
        return self.layers is not None

    def layers_for(self, index: int) -> list[str] | None:
        if self.layers is None:
            return None
        return self.layers[index]


@dataclass(frozen=True)
class DeployResult:
    target: Target
    update: FunctionUpdateResult
    layers: list[str] | None
    fingerprint_written: bool


# ---------------------------------------------------------------------------
# Layer and storage settings
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LayerConfig:
    """Managed layer settings.

    manifest_paths are the files whose content drives the fingerprint
    (e.g. pyproject.toml plus lock files).
    """

    layer_name: str
    compatible_runtimes: tuple[str, ...]
    manifest_paths: tuple[str, ...] = ("pyproject.toml",)
    description: str | None = None
    mount_prefix: str = DEFAULT_MOUNT_PREFIX
    archive_stem: str = DEFAULT_ARCHIVE_STEM


@dataclass(frozen=True)
class StorageConfig:
    bucket: str
    region: str | None = None
    sub_dir: str | None = None
    endpoint_url: str | None = None
    upload_timeout_seconds: int = MIN_UPLOAD_TIMEOUT_SECONDS
