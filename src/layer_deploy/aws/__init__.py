"""
layer_deploy.aws — boto3 adapters for the collaborator protocols.

    LambdaControlPlane   — functions and layer versions (AWS Lambda)
    S3ObjectStore        — layer bundles (Amazon S3)
    SsmFingerprintStore  — last deployed fingerprint per target (SSM Parameter Store)
    ClientRegistry       — boto3 clients cached per credential identity
"""

from layer_deploy.aws.lambda_control_plane import LambdaControlPlane
from layer_deploy.aws.registry import ClientRegistry
from layer_deploy.aws.s3_store import S3ObjectStore
from layer_deploy.aws.ssm_store import SsmFingerprintStore

__all__ = ["ClientRegistry", "LambdaControlPlane", "S3ObjectStore", "SsmFingerprintStore"]
