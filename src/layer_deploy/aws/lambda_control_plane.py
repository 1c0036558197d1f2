"""
layer_deploy.aws.lambda_control_plane — ControlPlane backed by AWS Lambda.

Layer "not found" is detected from Error.Code == ResourceNotFoundException
and raised as LayerNotFoundError.  Every other ClientError/BotoCoreError is
raised as ControlPlaneError with the code preserved.
"""

from __future__ import annotations

from typing import Any

from aws_lambda_powertools import Logger
from botocore.exceptions import BotoCoreError, ClientError

from layer_deploy.aws._errors import error_code, error_message
from layer_deploy.exceptions import ControlPlaneError, LayerNotFoundError
from layer_deploy.models import (
    ArtifactLocation,
    FunctionUpdateResult,
    LayerVersionRef,
    LayerVersionSummary,
)

logger = Logger(service="layer-deploy")

_NOT_FOUND = "ResourceNotFoundException"


def _wrap(action: str, exc: ClientError | BotoCoreError) -> ControlPlaneError:
    if isinstance(exc, ClientError):
        return ControlPlaneError(f"{action} failed: {error_message(exc)}", code=error_code(exc))
    return ControlPlaneError(f"{action} failed: {exc}")


def layer_name_from_arn(layer_arn: str) -> str:
    """arn:aws:lambda:<region>:<account>:layer:<name>[:<version>] -> <name>."""
    parts = layer_arn.split(":")
    if len(parts) >= 7 and parts[5] == "layer":
        return parts[6]
    return ""


class LambdaControlPlane:
    """
    Lambda control plane for one credential identity and region.

    The service half of a (service, function) target is a logical grouping
    only; Lambda addresses functions by function name.
    """

    def __init__(self, lambda_client: Any, *, wait_for_updates: bool = True) -> None:
        self._lambda: Any = lambda_client
        self._wait_for_updates = wait_for_updates

    def get_function_layers(self, service: str, function: str) -> list[str]:
        try:
            response = self._lambda.get_function_configuration(FunctionName=function)
        except (ClientError, BotoCoreError) as exc:
            raise _wrap(f"GetFunctionConfiguration {service}/{function}", exc) from exc
        return [str(layer["Arn"]) for layer in response.get("Layers", []) if layer.get("Arn")]

    def list_layer_versions(self, layer_name: str, max_items: int) -> list[LayerVersionSummary]:
        try:
            response = self._lambda.list_layer_versions(LayerName=layer_name, MaxItems=max_items)
        except ClientError as exc:
            if error_code(exc) == _NOT_FOUND:
                raise LayerNotFoundError(layer_name) from exc
            raise _wrap(f"ListLayerVersions {layer_name}", exc) from exc
        except BotoCoreError as exc:
            raise _wrap(f"ListLayerVersions {layer_name}", exc) from exc

        return [
            LayerVersionSummary(
                name=layer_name,
                version=int(item.get("Version", 0)),
                description=str(item.get("Description", "")),
                reference=str(item.get("LayerVersionArn", "")),
            )
            for item in response.get("LayerVersions", [])
        ]

    def create_layer_version(
        self,
        layer_name: str,
        description: str,
        compatible_runtimes: list[str],
        artifact: ArtifactLocation,
    ) -> LayerVersionRef:
        try:
            response = self._lambda.publish_layer_version(
                LayerName=layer_name,
                Description=description,
                Content={"S3Bucket": artifact.bucket, "S3Key": artifact.object_key},
                CompatibleRuntimes=compatible_runtimes,
            )
        except (ClientError, BotoCoreError) as exc:
            raise _wrap(f"PublishLayerVersion {layer_name}", exc) from exc

        return LayerVersionRef(
            name=layer_name_from_arn(str(response.get("LayerArn", ""))),
            version=int(response.get("Version", 0)),
            reference=str(response.get("LayerVersionArn", "")),
            description=str(response.get("Description", description)),
            code_size=response.get("Content", {}).get("CodeSize"),
        )

    def _wait_until_updated(self, function: str) -> None:
        if self._wait_for_updates:
            self._lambda.get_waiter("function_updated").wait(FunctionName=function)

    def update_function(
        self,
        service: str,
        function: str,
        code: bytes,
        layer_refs: list[str] | None = None,
    ) -> FunctionUpdateResult:
        """Upload new code, then apply layer_refs when given.

        layer_refs=None leaves the function's layer configuration untouched.
        """
        try:
            response = self._lambda.update_function_code(FunctionName=function, ZipFile=code)
            if layer_refs is not None:
                self._wait_until_updated(function)
                response = self._lambda.update_function_configuration(
                    FunctionName=function, Layers=layer_refs
                )
        except (ClientError, BotoCoreError) as exc:
            raise _wrap(f"UpdateFunction {service}/{function}", exc) from exc

        architectures = response.get("Architectures") or []
        return FunctionUpdateResult(
            status_code=int(response.get("ResponseMetadata", {}).get("HTTPStatusCode", 0)),
            code_size=response.get("CodeSize"),
            cpu=",".join(architectures) or None,
            memory=response.get("MemorySize"),
        )
