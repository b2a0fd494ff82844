# =============================================================================
# S3 Blob Storage
# =============================================================================
#
# Setup:
#   Set env vars:
#      - BLOB_BACKEND=s3
#      - AWS_S3_BUCKET=quire-manuscripts
#      - AWS_ACCESS_KEY_ID=...
#      - AWS_SECRET_ACCESS_KEY=...
#      - AWS_REGION=us-east-2
#
# boto3 is synchronous, so every call runs in the default executor.
# Transient connection failures are retried; client errors are not.
#
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any, Callable

import boto3
from botocore.exceptions import ClientError, ConnectionClosedError, EndpointConnectionError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from quire.config import Settings
from quire.storage.base import BlobStore

logger = logging.getLogger(__name__)


_transient = retry(
    retry=retry_if_exception_type((EndpointConnectionError, ConnectionClosedError)),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
    reraise=True,
)


class S3BlobStore(BlobStore):
    """Manuscripts stored as objects in a single bucket."""

    def __init__(self, bucket: str, client: Any = None, region: str = "us-east-2"):
        self.bucket = bucket
        self.client = client or boto3.client("s3", region_name=region)

    @classmethod
    def from_settings(cls, settings: Settings) -> S3BlobStore:
        client = boto3.client(
            "s3",
            region_name=settings.aws_region,
            aws_access_key_id=settings.aws_access_key_id or None,
            aws_secret_access_key=settings.aws_secret_access_key or None,
        )
        return cls(settings.aws_s3_bucket, client=client, region=settings.aws_region)

    @_transient
    async def _call(self, fn: Callable[..., Any], **kwargs) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(fn, **kwargs))

    async def put(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        await self._call(
            self.client.put_object,
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
            ACL="bucket-owner-full-control",
        )
        logger.info(f"Uploaded s3://{self.bucket}/{key} ({len(data)} bytes)")
        return key

    async def get(self, key: str) -> bytes:
        try:
            response = await self._call(self.client.get_object, Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                raise FileNotFoundError(f"Content not found: {key}") from e
            raise
        body = response["Body"]
        try:
            return body.read()
        finally:
            body.close()

    async def delete(self, key: str) -> bool:
        await self._call(self.client.delete_object, Bucket=self.bucket, Key=key)
        logger.info(f"Deleted s3://{self.bucket}/{key}")
        return True

    async def get_url(self, key: str, expires_in: int = 3600) -> str:
        return await self._call(
            self.client.generate_presigned_url,
            ClientMethod="get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=expires_in,
        )
