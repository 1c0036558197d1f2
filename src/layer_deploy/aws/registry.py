"""
layer_deploy.aws.registry — boto3 clients cached per credential identity.

Owned by the orchestrator and passed down explicitly; there is no module
level client cache.  One client is built per (service, access key, region,
endpoint, timeout) and reused for every target sharing that identity.
"""

from __future__ import annotations

import os
from typing import Any

import boto3
from botocore.config import Config

from layer_deploy.aws.lambda_control_plane import LambdaControlPlane
from layer_deploy.aws.s3_store import S3ObjectStore
from layer_deploy.aws.ssm_store import DEFAULT_SSM_PREFIX, SsmFingerprintStore
from layer_deploy.exceptions import ConfigError
from layer_deploy.models import StorageConfig, Target

_ClientKey = tuple[str, str | None, str, str | None, int | None]


def require_aws_region(region: str | None = None) -> str:
    """Return region, else AWS_REGION from the environment; fail fast if neither."""
    resolved = (region or os.environ.get("AWS_REGION", "")).strip()
    if not resolved:
        raise ConfigError("AWS_REGION must be set (or a region configured)")
    return resolved


class ClientRegistry:
    def __init__(
        self,
        *,
        default_region: str | None = None,
        wait_for_updates: bool = True,
        session: Any = None,
    ) -> None:
        self._default_region = default_region
        self._wait_for_updates = wait_for_updates
        self._session: Any = session or boto3
        self._clients: dict[_ClientKey, Any] = {}
        self._control_planes: dict[_ClientKey, LambdaControlPlane] = {}

    def __len__(self) -> int:
        return len(self._clients)

    def client(
        self,
        service_name: str,
        *,
        region: str | None = None,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        read_timeout: int | None = None,
    ) -> Any:
        resolved_region = require_aws_region(region or self._default_region)
        key: _ClientKey = (service_name, access_key_id, resolved_region, endpoint_url, read_timeout)
        if key not in self._clients:
            kwargs: dict[str, Any] = {"region_name": resolved_region}
            if endpoint_url:
                kwargs["endpoint_url"] = endpoint_url
            if access_key_id and secret_access_key:
                kwargs["aws_access_key_id"] = access_key_id
                kwargs["aws_secret_access_key"] = secret_access_key
            if read_timeout is not None:
                kwargs["config"] = Config(connect_timeout=60, read_timeout=read_timeout)
            self._clients[key] = self._session.client(service_name, **kwargs)
        return self._clients[key]

    def control_plane_for(self, target: Target) -> LambdaControlPlane:
        key: _ClientKey = (
            "lambda",
            target.access_key_id,
            require_aws_region(target.region or self._default_region),
            target.endpoint_url,
            None,
        )
        if key not in self._control_planes:
            lambda_client = self.client(
                "lambda",
                region=target.region,
                endpoint_url=target.endpoint_url,
                access_key_id=target.access_key_id,
                secret_access_key=target.secret_access_key,
            )
            self._control_planes[key] = LambdaControlPlane(
                lambda_client, wait_for_updates=self._wait_for_updates
            )
        return self._control_planes[key]

    def object_store(
        self,
        storage: StorageConfig,
        *,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
    ) -> S3ObjectStore:
        def _upload_client(timeout: int) -> Any:
            return self.client(
                "s3",
                region=storage.region,
                endpoint_url=storage.endpoint_url,
                access_key_id=access_key_id,
                secret_access_key=secret_access_key,
                read_timeout=timeout,
            )

        s3_client = self.client(
            "s3",
            region=storage.region,
            endpoint_url=storage.endpoint_url,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
        )
        return S3ObjectStore(storage.bucket, s3_client=s3_client, upload_client_for=_upload_client)

    def fingerprint_store(
        self, *, region: str | None = None, prefix: str = DEFAULT_SSM_PREFIX
    ) -> SsmFingerprintStore:
        return SsmFingerprintStore(self.client("ssm", region=region), prefix=prefix)
