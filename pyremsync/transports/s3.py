"""S3-compatible object store transport (AWS S3, MinIO, R2, OSS...)."""

import logging
from pathlib import Path
from typing import Any, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..config import S3RemoteConfig
from ..exceptions import RemsyncTransportError
from ..sync.models import ListPage, ObjectSummary
from .base import PaginatedTransport

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000


def _describe_client_error(e: ClientError) -> str:
    error = e.response.get("Error", {})
    code = error.get("Code", "Unknown")
    message = error.get("Message") or str(e)
    return f"{code}: {message}"


class S3Transport(PaginatedTransport):
    """Transport writing objects to a bucket through boto3."""

    kind = "s3"
    supports_content_type = True

    def __init__(
        self,
        bucket: str,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
        client: Any = None,
    ):
        """Initialize S3 transport.

        Args:
            bucket: Bucket name
            region: Region name (e.g. "us-east-1")
            endpoint_url: Custom endpoint for S3-compatible services
            access_key_id: Access key (uses the default boto3 chain if omitted)
            secret_access_key: Secret key
            page_size: Maximum keys per listing page
            client: Pre-built boto3 S3 client (mainly for tests)
        """
        self.bucket = bucket
        self.page_size = page_size

        if client is None:
            kwargs: dict[str, Any] = {
                "config": BotoConfig(
                    region_name=region,
                    signature_version="s3v4",
                    retries={"max_attempts": 3, "mode": "standard"},
                ),
            }
            if access_key_id and secret_access_key:
                kwargs["aws_access_key_id"] = access_key_id
                kwargs["aws_secret_access_key"] = secret_access_key
            if endpoint_url:
                kwargs["endpoint_url"] = endpoint_url
            client = boto3.client("s3", **kwargs)
            logger.debug(
                f"Created S3 client for bucket {bucket} "
                f"(region={region}, endpoint={endpoint_url or 'default'})"
            )

        self._client = client

    @classmethod
    def from_config(cls, remote: S3RemoteConfig) -> "S3Transport":
        return cls(
            bucket=remote.bucket,
            region=remote.region,
            endpoint_url=remote.endpoint_url,
            access_key_id=remote.access_key_id,
            secret_access_key=remote.secret_access_key,
        )

    def list_page(
        self, prefix: str, continuation_token: Optional[str] = None
    ) -> ListPage:
        kwargs: dict[str, Any] = {
            "Bucket": self.bucket,
            "Prefix": prefix,
            "MaxKeys": self.page_size,
        }
        if continuation_token:
            kwargs["ContinuationToken"] = continuation_token

        try:
            response = self._client.list_objects_v2(**kwargs)
        except ClientError as e:
            raise RemsyncTransportError(
                f"Failed to list s3://{self.bucket}/{prefix}: "
                f"{_describe_client_error(e)}"
            ) from e
        except BotoCoreError as e:
            raise RemsyncTransportError(
                f"Failed to list s3://{self.bucket}/{prefix}: {e}"
            ) from e

        objects = []
        for obj in response.get("Contents", []):
            last_modified = obj.get("LastModified")
            objects.append(
                ObjectSummary(
                    key=obj["Key"],
                    size=obj.get("Size"),
                    mtime=last_modified.timestamp() if last_modified else None,
                )
            )

        next_token = None
        if response.get("IsTruncated"):
            next_token = response.get("NextContinuationToken")
        return ListPage(objects=objects, next_token=next_token)

    def put(
        self,
        local_path: Path,
        remote_key: str,
        content_type: Optional[str] = None,
    ) -> None:
        extra: dict[str, Any] = {}
        if content_type:
            extra["ContentType"] = content_type

        try:
            with open(local_path, "rb") as body:
                self._client.put_object(
                    Bucket=self.bucket,
                    Key=remote_key,
                    Body=body,
                    **extra,
                )
        except ClientError as e:
            raise RemsyncTransportError(
                f"Failed to upload {local_path} to s3://{self.bucket}/{remote_key}: "
                f"{_describe_client_error(e)}"
            ) from e
        except BotoCoreError as e:
            raise RemsyncTransportError(
                f"Failed to upload {local_path} to s3://{self.bucket}/{remote_key}: {e}"
            ) from e

    def delete(self, remote_key: str) -> None:
        try:
            self._client.delete_object(Bucket=self.bucket, Key=remote_key)
        except ClientError as e:
            raise RemsyncTransportError(
                f"Failed to delete s3://{self.bucket}/{remote_key}: "
                f"{_describe_client_error(e)}"
            ) from e
        except BotoCoreError as e:
            raise RemsyncTransportError(
                f"Failed to delete s3://{self.bucket}/{remote_key}: {e}"
            ) from e

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if callable(close):
            close()

    def __repr__(self) -> str:
        return f"S3Transport(bucket={self.bucket!r})"
