"""S3-backed object storage for uploaded files.

Uploads never raise: a provider failure is reported back as a degraded
``UploadResult`` so the caller can still record the file.
"""
import logging
import re
import time
from dataclasses import dataclass
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import Request

from cloud_vault.core.config import Settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.\-]")
_EXTENSION = re.compile(r"\.[^/.]+$")


@dataclass
class UploadResult:
    url: str
    external_id: Optional[str]
    succeeded: bool
    warning: Optional[str] = None


def safe_name(original_name: str) -> str:
    return _UNSAFE_CHARS.sub("_", original_name)


def storage_key(folder: str, original_name: str, now_ms: Optional[int] = None) -> str:
    """Build a collision-resistant key: ``{folder}/{millis}-{sanitized base name}``."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    base = _EXTENSION.sub("", safe_name(original_name))
    return f"{folder}/{now_ms}-{base}"


class ObjectStorage:
    def __init__(self, client, bucket: str, folder: str, public_base_url: str):
        self.client = client
        self.bucket = bucket
        self.folder = folder
        self.public_base_url = public_base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> "ObjectStorage":
        client = boto3.client(
            "s3",
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region,
            endpoint_url=settings.aws_endpoint_url,
        )
        return cls(
            client,
            bucket=settings.aws_s3_bucket_name,
            folder=settings.storage_folder,
            public_base_url=settings.public_base_url,
        )

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    def upload(self, data: bytes, original_name: str, mime_type: str) -> UploadResult:
        key = storage_key(self.folder, original_name)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=mime_type or "application/octet-stream",
                IfNoneMatch="*",  # never overwrite an existing object
            )
        except (BotoCoreError, ClientError) as e:
            logger.error("Object storage upload failed for %s: %s", original_name, e)
            return UploadResult(
                url=f"data:{mime_type};base64,[truncated]",
                external_id=None,
                succeeded=False,
                warning=str(e),
            )

        logger.info("Uploaded %s to bucket %s as %s", original_name, self.bucket, key)
        return UploadResult(url=self.url_for(key), external_id=key, succeeded=True)

    def delete(self, external_id: Optional[str]) -> None:
        if not external_id:
            return
        try:
            self.client.delete_object(Bucket=self.bucket, Key=external_id)
        except (BotoCoreError, ClientError) as e:
            # best effort; the object is left behind
            logger.warning("Could not delete %s from object storage: %s", external_id, e)


# storage dependency
def get_storage(request: Request) -> ObjectStorage:
    return request.app.state.storage
