# app/services/storage.py
"""
S3-compatible object storage (Cloudflare R2, Supabase Storage S3 endpoint, AWS S3).

Buckets:
    products-files    - purchasable files, private; handed out through presigned URLs
    profile-pictures  - public avatars served from STORAGE_PUBLIC_BASE
"""
import logging
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


class StorageError(Exception):
    pass


class StorageNotFound(StorageError):
    pass


class ObjectExists(StorageError):
    pass


def _is_not_found(e: ClientError) -> bool:
    return str(e.response.get("Error", {}).get("Code")) in _NOT_FOUND_CODES


def make_s3_client(
    endpoint_url: Optional[str],
    access_key_id: Optional[str],
    secret_access_key: Optional[str],
    region_name: str = "auto",
):
    return boto3.client(
        "s3",
        endpoint_url=endpoint_url or None,
        aws_access_key_id=access_key_id,
        aws_secret_access_key=secret_access_key,
        region_name=region_name,
        config=Config(signature_version="s3v4"),
    )


class ObjectStorage:
    def __init__(self, client, public_base: str = ""):
        self.client = client
        self.public_base = (public_base or "").rstrip("/")

    def exists(self, bucket: str, key: str) -> bool:
        try:
            self.client.head_object(Bucket=bucket, Key=key)
            return True
        except ClientError as e:
            if _is_not_found(e):
                return False
            raise StorageError(f"Failed to check {bucket}/{key}: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to check {bucket}/{key}: {e}") from e

    def upload(self, bucket: str, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        """Store `data` under `key`. Existing keys are never overwritten."""
        if self.exists(bucket, key):
            raise ObjectExists(f"Object already exists: {bucket}/{key}")
        extra = {"ContentType": content_type} if content_type else {}
        try:
            self.client.put_object(Bucket=bucket, Key=key, Body=data, **extra)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Upload failed: {e}") from e
        logger.info("Stored %s/%s (%d bytes)", bucket, key, len(data))
        return key

    def download(self, bucket: str, key: str) -> bytes:
        try:
            response = self.client.get_object(Bucket=bucket, Key=key)
            return response["Body"].read()
        except ClientError as e:
            if _is_not_found(e):
                raise StorageNotFound(f"File not found: {bucket}/{key}") from e
            raise StorageError(f"Download failed: {e}") from e
        except BotoCoreError as e:
            raise StorageError(f"Download failed: {e}") from e

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self.public_base}/{bucket}/{key}"

    def signed_url(self, bucket: str, key: str, expires_in: int = 3600) -> str:
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to generate URL: {e}") from e
