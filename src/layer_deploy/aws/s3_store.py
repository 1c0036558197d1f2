"""
layer_deploy.aws.s3_store — ObjectStore backed by Amazon S3.

head_object 404/NoSuchKey/NotFound means "absent"; every other failure is a
StorageError.  Uploads run on a client configured with the caller's timeout
(large dependency bundles must not hit the default read timeout).
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from layer_deploy.archive import remove_leading_slash
from layer_deploy.aws._errors import error_code, error_message
from layer_deploy.exceptions import StorageError

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class S3ObjectStore:
    def __init__(
        self,
        bucket: str,
        *,
        s3_client: Any,
        upload_client_for: Callable[[int], Any] | None = None,
    ) -> None:
        self.bucket = bucket
        self._s3: Any = s3_client
        self._upload_client_for = upload_client_for

    def exists(self, object_key: str) -> bool:
        key = remove_leading_slash(object_key)
        try:
            self._s3.head_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if error_code(exc) in _NOT_FOUND_CODES:
                return False
            raise StorageError(
                f"Existence check failed for s3://{self.bucket}/{key}: {error_message(exc)}",
                object_key=key,
            ) from exc
        except BotoCoreError as exc:
            raise StorageError(
                f"Existence check failed for s3://{self.bucket}/{key}: {exc}", object_key=key
            ) from exc
        return True

    def put(self, object_key: str, local_path: Path, timeout: int) -> str:
        key = remove_leading_slash(object_key)
        client = self._upload_client_for(timeout) if self._upload_client_for else self._s3
        try:
            client.upload_file(str(local_path), self.bucket, key)
        except (S3UploadFailedError, ClientError, BotoCoreError, OSError) as exc:
            raise StorageError(
                f"Upload to s3://{self.bucket}/{key} failed: {exc}", object_key=key
            ) from exc
        return self.url_for(key, region=client.meta.region_name)

    def url_for(self, object_key: str, *, region: str | None = None) -> str:
        if region:
            return f"https://{self.bucket}.s3.{region}.amazonaws.com/{object_key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{object_key}"
