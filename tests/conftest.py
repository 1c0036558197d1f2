"""Shared fixtures: AWS env for moto and in-memory collaborator fakes."""

from __future__ import annotations

from pathlib import Path

import pytest
from layer_deploy.exceptions import ControlPlaneError, LayerNotFoundError, StorageError
from layer_deploy.models import (
    ArtifactLocation,
    FunctionUpdateResult,
    LayerConfig,
    LayerVersionRef,
    LayerVersionSummary,
    StorageConfig,
    Target,
)

REGION = "eu-west-2"
ACCOUNT = "111122223333"
LAYER_NAME = "managed-layer"
BUCKET = "layer-artifacts"


def layer_arn(name: str, version: int) -> str:
    return f"arn:aws:lambda:{REGION}:{ACCOUNT}:layer:{name}:{version}"


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeControlPlane:
    def __init__(self) -> None:
        self.function_layers: dict[str, list[str]] = {}
        self.versions: dict[str, list[LayerVersionSummary]] = {}
        self.publish_failures = 0
        self.publish_calls: list[dict[str, object]] = []
        self.get_layers_calls: list[tuple[str, str]] = []
        self.updates: list[dict[str, object]] = []
        self.fail_update_for: set[str] = set()
        self.list_error: Exception | None = None
        self.blank_publish_field: str | None = None

    def get_function_layers(self, service: str, function: str) -> list[str]:
        self.get_layers_calls.append((service, function))
        return list(self.function_layers.get(function, []))

    def list_layer_versions(self, layer_name: str, max_items: int) -> list[LayerVersionSummary]:
        if self.list_error is not None:
            raise self.list_error
        if layer_name not in self.versions:
            raise LayerNotFoundError(layer_name)
        return self.versions[layer_name][:max_items]

    def create_layer_version(
        self,
        layer_name: str,
        description: str,
        compatible_runtimes: list[str],
        artifact: ArtifactLocation,
    ) -> LayerVersionRef:
        self.publish_calls.append(
            {
                "layer_name": layer_name,
                "description": description,
                "compatible_runtimes": compatible_runtimes,
                "artifact": artifact,
            }
        )
        if self.publish_failures > 0:
            self.publish_failures -= 1
            raise ControlPlaneError("throttled", code="TooManyRequestsException")

        existing = self.versions.setdefault(layer_name, [])
        version = len(existing) + 1
        summary = LayerVersionSummary(
            name=layer_name,
            version=version,
            description=description,
            reference=layer_arn(layer_name, version),
        )
        existing.insert(0, summary)
        return LayerVersionRef(
            name="" if self.blank_publish_field == "name" else layer_name,
            version=version,
            reference="" if self.blank_publish_field == "reference" else summary.reference,
            description=description,
            code_size=1234,
        )

    def update_function(
        self,
        service: str,
        function: str,
        code: bytes,
        layer_refs: list[str] | None = None,
    ) -> FunctionUpdateResult:
        if function in self.fail_update_for:
            raise ControlPlaneError(f"update of {function} failed", code="ServiceException")
        self.updates.append(
            {"service": service, "function": function, "code": code, "layers": layer_refs}
        )
        if layer_refs is not None:
            self.function_layers[function] = list(layer_refs)
        return FunctionUpdateResult(status_code=200, code_size=len(code), cpu="arm64", memory=512)


class FakeObjectStore:
    def __init__(self, bucket: str = BUCKET) -> None:
        self.bucket = bucket
        self.objects: dict[str, bytes] = {}
        self.put_calls: list[tuple[str, int]] = []
        self.exists_error: Exception | None = None
        self.put_error: Exception | None = None

    def exists(self, object_key: str) -> bool:
        if self.exists_error is not None:
            raise self.exists_error
        return object_key in self.objects

    def put(self, object_key: str, local_path: Path, timeout: int) -> str:
        self.put_calls.append((object_key, timeout))
        if self.put_error is not None:
            raise self.put_error
        self.objects[object_key] = Path(local_path).read_bytes()
        return f"https://{self.bucket}.s3.amazonaws.com/{object_key}"


class FakeFingerprintStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.hashes: dict[str, str] = dict(initial or {})
        self.set_calls: list[tuple[str, str]] = []

    def get_hash(self, target_key: str) -> str | None:
        return self.hashes.get(target_key)

    def set_hash(self, target_key: str, fingerprint: str) -> None:
        self.set_calls.append((target_key, fingerprint))
        self.hashes[target_key] = fingerprint


class RecordingLogSink:
    def __init__(self, error: Exception | None = None) -> None:
        self.messages: list[str] = []
        self.error = error

    def emit(self, message: str) -> None:
        if self.error is not None:
            raise self.error
        self.messages.append(message)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def aws_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set minimal AWS env vars required by boto3 and moto."""
    monkeypatch.setenv("AWS_REGION", REGION)
    monkeypatch.setenv("AWS_DEFAULT_REGION", REGION)
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.delenv("LAYER_DEPLOY_DIST_PATH", raising=False)
    monkeypatch.delenv("LAYER_DEPLOY_DEPS_PATH", raising=False)
    monkeypatch.delenv("LAYER_DEPLOY_SSM_PREFIX", raising=False)


@pytest.fixture
def control_plane() -> FakeControlPlane:
    return FakeControlPlane()


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def fingerprint_store() -> FakeFingerprintStore:
    return FakeFingerprintStore()


@pytest.fixture
def log_sink() -> RecordingLogSink:
    return RecordingLogSink()


@pytest.fixture
def manifests(tmp_path: Path) -> list[str]:
    """Two manifest files with fixed content."""
    first = tmp_path / "pyproject.toml"
    first.write_text('[project]\nname = "orders"\nversion = "1.0.0"\n', encoding="utf-8")
    second = tmp_path / "uv.lock"
    second.write_text('version = 1\n[[package]]\nname = "boto3"\n', encoding="utf-8")
    return [str(first), str(second)]


@pytest.fixture
def deps_dir(tmp_path: Path) -> Path:
    deps = tmp_path / ".build" / "deps"
    (deps / "boto3").mkdir(parents=True)
    (deps / "boto3" / "__init__.py").write_text("__version__ = '1.37.0'\n", encoding="utf-8")
    (deps / "requests.py").write_text("# requests\n", encoding="utf-8")
    return deps


@pytest.fixture
def dist_dir(tmp_path: Path) -> Path:
    dist = tmp_path / "dist"
    dist.mkdir()
    (dist / "handler.py").write_text("def handler(event, context):\n    return 1\n")
    return dist


@pytest.fixture
def targets() -> list[Target]:
    return [Target(service="orders", function="orders-api"), Target("orders", "orders-worker")]


@pytest.fixture
def layer_config(manifests: list[str]) -> LayerConfig:
    return LayerConfig(
        layer_name=LAYER_NAME,
        compatible_runtimes=("python3.12",),
        manifest_paths=tuple(manifests),
    )


@pytest.fixture
def storage_config() -> StorageConfig:
    return StorageConfig(bucket=BUCKET, region=REGION)
