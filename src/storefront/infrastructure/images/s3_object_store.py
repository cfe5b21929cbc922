"""RemoteObjectStore backed by Amazon S3 (or any S3-compatible endpoint).

Objects are public-read under ``<folder>/<desired_name>.<ext>``; width, height
and format are read with Pillow before upload so records carry them.
"""

from __future__ import annotations

import io
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from PIL import Image, UnidentifiedImageError

from storefront.domain.exceptions import RemoteStoreError
from storefront.domain.model.image import RemoteUpload
from storefront.domain.repository.image_store import RemoteObjectStore

logger = logging.getLogger(__name__)

_CONTENT_TYPES = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}


class S3ObjectStore(RemoteObjectStore):

    def __init__(
        self,
        bucket: str,
        region: str,
        endpoint_url: str | None = None,
        public_base_url: str | None = None,
        client=None,
    ) -> None:
        self._bucket = bucket
        self._client = client or boto3.client(
            "s3", region_name=region, endpoint_url=endpoint_url
        )
        if public_base_url:
            self._public_base_url = public_base_url.rstrip("/")
        elif endpoint_url:
            self._public_base_url = f"{endpoint_url.rstrip('/')}/{bucket}"
        else:
            self._public_base_url = f"https://{bucket}.s3.{region}.amazonaws.com"

    def upload(self, data: bytes, folder: str, desired_name: str) -> RemoteUpload:
        width, height, fmt = _inspect(data)
        ext = (fmt or "bin").lower().replace("jpeg", "jpg")
        key = f"{folder.strip('/')}/{desired_name}.{ext}"
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=_CONTENT_TYPES.get(fmt or "", "application/octet-stream"),
                CacheControl="public, max-age=31536000",
            )
        except (BotoCoreError, ClientError) as exc:
            raise RemoteStoreError(f"S3 upload of {key} failed: {exc}") from exc
        logger.info("Uploaded s3://%s/%s (%d bytes)", self._bucket, key, len(data))
        return RemoteUpload(
            id=key,
            url=f"{self._public_base_url}/{key}",
            width=width,
            height=height,
            format=fmt.lower() if fmt else None,
            byte_size=len(data),
        )

    def delete(self, remote_id: str) -> None:
        try:
            self._client.delete_object(Bucket=self._bucket, Key=remote_id)
        except (BotoCoreError, ClientError) as exc:
            raise RemoteStoreError(f"S3 delete of {remote_id} failed: {exc}") from exc
        logger.info("Deleted s3://%s/%s", self._bucket, remote_id)


def _inspect(data: bytes) -> tuple[int | None, int | None, str | None]:
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.width, img.height, img.format
    except (UnidentifiedImageError, OSError):
        logger.warning("Upload is not a readable image, storing without dimensions")
        return None, None, None
