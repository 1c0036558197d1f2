"""Unit tests for layer_deploy.aws.ssm_store (moto)."""

from __future__ import annotations

from unittest.mock import MagicMock

import boto3
import pytest
from botocore.exceptions import ClientError
from conftest import REGION
from layer_deploy.aws.ssm_store import SsmFingerprintStore
from layer_deploy.exceptions import StorageError
from moto import mock_aws


@mock_aws
def test_get_hash_returns_none_when_parameter_absent() -> None:
    store = SsmFingerprintStore(boto3.client("ssm", region_name=REGION))
    assert store.get_hash("orders-orders-api") is None


@mock_aws
def test_get_hash_returns_stored_value() -> None:
    ssm = boto3.client("ssm", region_name=REGION)
    ssm.put_parameter(
        Name="/layer-deploy/hashes/orders-orders-api/hash", Value="abc123", Type="String"
    )
    assert SsmFingerprintStore(ssm).get_hash("orders-orders-api") == "abc123"


@mock_aws
def test_set_hash_overwrites() -> None:
    store = SsmFingerprintStore(boto3.client("ssm", region_name=REGION), prefix="custom/prefix/")
    store.set_hash("orders-orders-api", "first")
    store.set_hash("orders-orders-api", "second")
    assert store.parameter_name("orders-orders-api") == "/custom/prefix/orders-orders-api/hash"
    assert store.get_hash("orders-orders-api") == "second"


def test_get_hash_other_error_raises() -> None:
    client = MagicMock()
    client.get_parameter.side_effect = ClientError(
        {"Error": {"Code": "AccessDeniedException", "Message": "denied"}}, "GetParameter"
    )
    with pytest.raises(StorageError, match="denied"):
        SsmFingerprintStore(client).get_hash("orders-orders-api")


def test_set_hash_error_raises() -> None:
    client = MagicMock()
    client.put_parameter.side_effect = ClientError(
        {"Error": {"Code": "ThrottlingException", "Message": "slow down"}}, "PutParameter"
    )
    with pytest.raises(StorageError):
        SsmFingerprintStore(client).set_hash("orders-orders-api", "abc")
