"""
layer_deploy.config — Deploy configuration loaded from TOML.

Sources, in order of precedence:
    1. LAYER_DEPLOY_* environment variables (path and prefix overrides)
    2. layer-deploy.toml, or [tool.layer-deploy] in pyproject.toml
    3. Defaults (dist/ for code, .build/deps for dependencies)

Relative paths are resolved against the directory holding the config file.

Example layer-deploy.toml:

    name = "orders"
    region = "eu-west-2"

    [layer]
    name = "orders-deps"
    compatible_runtimes = ["python3.12"]
    manifest_paths = ["pyproject.toml", "uv.lock"]

    [storage]
    bucket = "orders-artifacts"

    [[targets]]
    service = "orders"
    function = "orders-api"
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from layer_deploy.aws.ssm_store import DEFAULT_SSM_PREFIX
from layer_deploy.exceptions import ConfigError
from layer_deploy.fingerprint import read_project_version
from layer_deploy.models import (
    DEFAULT_ARCHIVE_STEM,
    DEFAULT_MOUNT_PREFIX,
    MIN_UPLOAD_TIMEOUT_SECONDS,
    LayerConfig,
    StorageConfig,
    Target,
)

DEFAULT_CONFIG_FILE = "layer-deploy.toml"
DEFAULT_DIST_PATH = "dist"
DEFAULT_DEPS_PATH = ".build/deps"

_DIST_PATH_ENV = "LAYER_DEPLOY_DIST_PATH"
_DEPS_PATH_ENV = "LAYER_DEPLOY_DEPS_PATH"
_SSM_PREFIX_ENV = "LAYER_DEPLOY_SSM_PREFIX"


@dataclass(frozen=True)
class DeployConfig:
    name: str
    project_version: str
    dist_path: Path
    deps_path: Path
    layer: LayerConfig
    storage: StorageConfig
    targets: tuple[Target, ...]
    region: str | None = None
    ssm_prefix: str = DEFAULT_SSM_PREFIX
    webhook_url: str | None = None


def _require_str(table: dict[str, Any], key: str, where: str) -> str:
    value = table.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"{where}.{key} is required")
    return value.strip()


def _optional_str(table: dict[str, Any], key: str) -> str | None:
    value = table.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ConfigError(f"{key} must be a string")
    return value.strip() or None


def _str_or_default(
    table: dict[str, Any], key: str, default: str | None, where: str | None = None
) -> str | None:
    value = table.get(key, default)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"{where}.{key} must be a string" if where else f"{key} must be a string")
    return value


def _str_list(table: dict[str, Any], key: str, where: str) -> tuple[str, ...]:
    value = table.get(key)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{where}.{key} must be a list of strings")
    return tuple(value)


def _resolve(base_dir: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else base_dir / path


def _parse_layer(raw: dict[str, Any], base_dir: Path) -> LayerConfig:
    runtimes = _str_list(raw, "compatible_runtimes", "layer")
    if not runtimes:
        raise ConfigError("layer.compatible_runtimes must not be empty")
    manifests: tuple[str, ...] = ("pyproject.toml",)
    if "manifest_paths" in raw:
        manifests = _str_list(raw, "manifest_paths", "layer")
    if not manifests:
        raise ConfigError("layer.manifest_paths must not be empty")
    return LayerConfig(
        layer_name=_require_str(raw, "name", "layer"),
        compatible_runtimes=runtimes,
        manifest_paths=tuple(str(_resolve(base_dir, m)) for m in manifests),
        description=_str_or_default(raw, "description", None, "layer"),
        mount_prefix=_str_or_default(raw, "mount_prefix", DEFAULT_MOUNT_PREFIX, "layer") or "",
        archive_stem=_str_or_default(raw, "archive_stem", DEFAULT_ARCHIVE_STEM, "layer")
        or DEFAULT_ARCHIVE_STEM,
    )


def _parse_storage(raw: dict[str, Any]) -> StorageConfig:
    timeout = raw.get("upload_timeout_seconds", MIN_UPLOAD_TIMEOUT_SECONDS)
    if not isinstance(timeout, int) or timeout < MIN_UPLOAD_TIMEOUT_SECONDS:
        raise ConfigError(
            f"storage.upload_timeout_seconds must be an integer >= {MIN_UPLOAD_TIMEOUT_SECONDS}"
        )
    return StorageConfig(
        bucket=_require_str(raw, "bucket", "storage"),
        region=_optional_str(raw, "region"),
        sub_dir=_optional_str(raw, "sub_dir"),
        endpoint_url=_optional_str(raw, "endpoint_url"),
        upload_timeout_seconds=timeout,
    )


def _parse_targets(raw: Any) -> tuple[Target, ...]:
    if not isinstance(raw, list) or not raw:
        raise ConfigError("At least one [[targets]] entry is required")
    targets: list[Target] = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ConfigError(f"targets[{index}] must be a table")
        where = f"targets[{index}]"
        targets.append(
            Target(
                service=_require_str(entry, "service", where),
                function=_require_str(entry, "function", where),
                region=_optional_str(entry, "region"),
                endpoint_url=_optional_str(entry, "endpoint_url"),
                access_key_id=_optional_str(entry, "access_key_id"),
                secret_access_key=_optional_str(entry, "secret_access_key"),
            )
        )
    return tuple(targets)


def parse_config(raw: dict[str, Any], *, base_dir: Path) -> DeployConfig:
    """Build a DeployConfig from an already-parsed TOML table."""
    layer_raw = raw.get("layer")
    storage_raw = raw.get("storage")
    if not isinstance(layer_raw, dict):
        raise ConfigError("[layer] section is required")
    if not isinstance(storage_raw, dict):
        raise ConfigError("[storage] section is required")

    project_version = _optional_str(raw, "project_version")
    if project_version is None:
        project_version = read_project_version(base_dir / "pyproject.toml")

    dist_path = os.environ.get(_DIST_PATH_ENV) or _str_or_default(raw, "dist_path", None)
    deps_path = os.environ.get(_DEPS_PATH_ENV) or _str_or_default(raw, "deps_path", None)
    ssm_prefix = os.environ.get(_SSM_PREFIX_ENV) or _str_or_default(raw, "ssm_prefix", None)

    return DeployConfig(
        name=_optional_str(raw, "name") or base_dir.name,
        project_version=project_version,
        dist_path=_resolve(base_dir, dist_path or DEFAULT_DIST_PATH),
        deps_path=_resolve(base_dir, deps_path or DEFAULT_DEPS_PATH),
        layer=_parse_layer(layer_raw, base_dir),
        storage=_parse_storage(storage_raw),
        targets=_parse_targets(raw.get("targets")),
        region=_optional_str(raw, "region"),
        ssm_prefix=ssm_prefix or DEFAULT_SSM_PREFIX,
        webhook_url=_optional_str(raw, "webhook_url"),
    )


def load_config(path: str | Path | None = None) -> DeployConfig:
    """Load configuration from path (default ./layer-deploy.toml).

    A pyproject.toml is read from its [tool.layer-deploy] table.
    """
    config_path = Path(path) if path is not None else Path.cwd() / DEFAULT_CONFIG_FILE
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")
    try:
        with config_path.open("rb") as fh:
            data = tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {config_path}: {exc}") from exc

    if config_path.name == "pyproject.toml":
        data = data.get("tool", {}).get("layer-deploy")
        if not isinstance(data, dict):
            raise ConfigError(f"[tool.layer-deploy] not found in {config_path}")
    return parse_config(data, base_dir=config_path.resolve().parent)
