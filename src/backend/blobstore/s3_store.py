"""
S3-compatible blob store (AWS S3, Aliyun OSS, MinIO) backed by boto3.

One client is created per tool call and closed when the call ends.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from .base import StoreError


logger = logging.getLogger(__name__)

# Error codes S3-compatible services return for a missing object on HEAD/GET
NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


def endpoint_url(endpoint: str) -> str:
    """Ensure the endpoint has a scheme (https by default)."""
    value = endpoint.strip().rstrip("/")
    if "://" not in value:
        value = f"https://{value}"
    return value


def _error_code(exc: ClientError) -> str:
    return str(exc.response.get("Error", {}).get("Code", ""))


class S3BlobStore:
    def __init__(
        self,
        *,
        endpoint: str,
        access_key_id: str,
        access_key_secret: str,
        bucket: str,
        region: Optional[str] = None,
        client: Any = None,
    ) -> None:
        self._bucket = bucket
        if client is not None:
            self._client = client
        else:
            # OSS only accepts virtual-hosted style requests.
            self._client = boto3.client(
                "s3",
                endpoint_url=endpoint_url(endpoint),
                aws_access_key_id=access_key_id,
                aws_secret_access_key=access_key_secret,
                region_name=region,
                config=Config(s3={"addressing_style": "virtual"}),
            )

    @property
    def bucket(self) -> str:
        return self._bucket

    def exists(self, key: str) -> bool:
        try:
            self._client.head_object(Bucket=self._bucket, Key=key)
            return True
        except ClientError as exc:
            if _error_code(exc) in NOT_FOUND_CODES:
                return False
            raise StoreError(f"查询对象失败：{key}: {exc}", key=key) from exc
        except BotoCoreError as exc:
            raise StoreError(f"查询对象失败：{key}: {exc}", key=key) from exc

    def get_text(self, key: str) -> Optional[str]:
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
            body = response["Body"]
            try:
                return body.read().decode("utf-8")
            finally:
                body.close()
        except (ClientError, BotoCoreError, UnicodeDecodeError, KeyError) as exc:
            logger.debug("get_text(%s) unreadable: %s", key, exc)
            return None

    def put_bytes(self, key: str, data: bytes, content_type: str) -> None:
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentLength=len(data),
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as exc:
            raise StoreError(f"上传对象失败：{key}: {exc}", key=key) from exc

    def close(self) -> None:
        close = getattr(self._client, "close", None)
        if callable(close):
            close()
