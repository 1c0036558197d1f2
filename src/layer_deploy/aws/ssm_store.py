"""
layer_deploy.aws.ssm_store — FingerprintStore backed by SSM Parameter Store.

Parameter name: {prefix}/{target_key}/hash
A missing parameter means the target has never been deployed (returns None).
"""

from __future__ import annotations

from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError

from layer_deploy.aws._errors import error_code, error_message
from layer_deploy.exceptions import StorageError

logger = Logger(service="layer-deploy")

DEFAULT_SSM_PREFIX = "/layer-deploy/hashes"


class SsmFingerprintStore:
    def __init__(self, ssm_client: Any, *, prefix: str = DEFAULT_SSM_PREFIX) -> None:
        self._ssm: Any = ssm_client
        self._prefix = "/" + prefix.strip("/")

    def parameter_name(self, target_key: str) -> str:
        return f"{self._prefix}/{target_key}/hash"

    def get_hash(self, target_key: str) -> str | None:
        param_name = self.parameter_name(target_key)
        try:
            response = self._ssm.get_parameter(Name=param_name)
        except ClientError as exc:
            if error_code(exc) == "ParameterNotFound":
                logger.info("SSM parameter not found", extra={"parameter": param_name})
                return None
            raise StorageError(f"Reading {param_name} failed: {error_message(exc)}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"Reading {param_name} failed: {exc}") from exc
        value = response["Parameter"].get("Value")
        return str(value) if value else None

    def set_hash(self, target_key: str, fingerprint: str) -> None:
        param_name = self.parameter_name(target_key)
        try:
            self._ssm.put_parameter(
                Name=param_name, Value=fingerprint, Type="String", Overwrite=True
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(f"Writing {param_name} failed: {exc}") from exc
