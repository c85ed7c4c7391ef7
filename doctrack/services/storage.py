from __future__ import annotations

import io
import uuid
from dataclasses import dataclass
from typing import Any, BinaryIO, Optional
from urllib.parse import quote

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..config import settings


def s3_client() -> Any:
    blob = settings.blob
    options: dict[str, Any] = {"region_name": blob.region, "config": Config(retries={"max_attempts": 3})}
    if blob.has_write_credentials:
        options["aws_access_key_id"] = blob.access_key_id
        options["aws_secret_access_key"] = blob.secret_access_key
    if blob.s3_endpoint_url:
        options["endpoint_url"] = blob.s3_endpoint_url
    try:
        return boto3.client("s3", **options)
    except (BotoCoreError, ValueError) as exc:
        # botocore rejects malformed endpoint URLs with a bare ValueError.
        raise RuntimeError(f"Failed to initialise S3 client: {exc}") from exc


@dataclass
class StoredBlob:
    key: str
    url: str
    content_type: str
    size: int


class BlobStorageService:
    def __init__(self, bucket: Optional[str] = None) -> None:
        self.bucket = bucket or settings.blob.s3_bucket
        self._client = s3_client()

    def _build_key(self, filename: str) -> str:
        prefix = settings.blob.key_prefix.strip("/")
        key = f"{uuid.uuid4().hex}/{filename}"
        return f"{prefix}/{key}" if prefix else key

    def public_url(self, key: str) -> str:
        quoted = quote(key)
        base_url = settings.blob.public_base_url
        if base_url:
            return f"{base_url.rstrip('/')}/{quoted}"
        if settings.blob.s3_endpoint_url:
            return f"{settings.blob.s3_endpoint_url.rstrip('/')}/{self.bucket}/{quoted}"
        return f"https://{self.bucket}.s3.{settings.blob.region}.amazonaws.com/{quoted}"

    def put(
        self,
        filename: str,
        body: BinaryIO | bytes,
        content_type: str = "application/octet-stream",
    ) -> StoredBlob:
        buffer: BinaryIO
        if isinstance(body, (bytes, bytearray)):
            buffer = io.BytesIO(body)
        else:
            buffer = body
            buffer.seek(0)

        size = buffer.seek(0, io.SEEK_END)
        buffer.seek(0)

        key = self._build_key(filename)
        extra_args = {"ContentType": content_type}

        try:
            self._client.upload_fileobj(buffer, self.bucket, key, ExtraArgs=extra_args)
        except (BotoCoreError, ClientError, S3UploadFailedError) as exc:
            raise RuntimeError(f"Failed to upload to S3: {exc}") from exc

        return StoredBlob(key=key, url=self.public_url(key), content_type=content_type, size=size)


def get_blob_storage() -> BlobStorageService:
    return BlobStorageService()
