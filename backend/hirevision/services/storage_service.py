import logging
import mimetypes
from pathlib import Path

import aioboto3
from botocore.exceptions import BotoCoreError, ClientError

from hirevision.config import settings
from hirevision.utils.hashing import sha256_bytes

logger = logging.getLogger(__name__)


class StorageError(Exception):
    pass


class ObjectNotFound(StorageError):
    pass


def _guess_type(key: str) -> str:
    return mimetypes.guess_type(key)[0] or "application/octet-stream"


def key_segments(key: str) -> list[str]:
    """Split an object key, refusing anything that is not a plain relative path."""
    segments = key.split("/")
    if "\\" in key or any(s in ("", ".", "..") for s in segments):
        raise ObjectNotFound(key)
    return segments


class LocalStorage:
    """Objects stored as plain files under ``settings.storage_dir``."""

    def __init__(self, root: Path | None = None):
        self.root = root or settings.storage_dir

    def _path_for(self, key: str) -> Path:
        root = self.root.resolve()
        path = root.joinpath(*key_segments(key)).resolve()
        if root not in path.parents:
            raise ObjectNotFound(key)
        return path

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> dict:
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as exc:
            logger.error("Local storage write failed for %s: %s", key, exc)
            raise StorageError("Failed to store file") from exc
        return {
            "key": key,
            "size": len(data),
            "sha256": sha256_bytes(data),
            "content_type": content_type or _guess_type(key),
        }

    async def get(self, key: str) -> tuple[bytes, str]:
        path = self._path_for(key)
        if not path.is_file():
            raise ObjectNotFound(key)
        return path.read_bytes(), _guess_type(key)


class S3Storage:
    """S3-compatible bucket (AWS, Vultr Object Storage, MinIO)."""

    def __init__(self, bucket: str | None = None):
        self.bucket = bucket or settings.s3_bucket

    def _session(self):
        return aioboto3.Session(
            aws_access_key_id=settings.s3_access_key,
            aws_secret_access_key=settings.s3_secret_key,
            region_name=settings.s3_region,
        )

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> dict:
        key_segments(key)
        content_type = content_type or _guess_type(key)
        try:
            async with self._session().client("s3", endpoint_url=settings.s3_endpoint) as client:
                await client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        except (BotoCoreError, ClientError) as exc:
            logger.error("S3 upload failed for %s/%s: %s", self.bucket, key, exc)
            raise StorageError("Failed to store file") from exc
        logger.info("Uploaded %s/%s (%d bytes)", self.bucket, key, len(data))
        return {
            "key": key,
            "size": len(data),
            "sha256": sha256_bytes(data),
            "content_type": content_type,
        }

    async def get(self, key: str) -> tuple[bytes, str]:
        key_segments(key)
        try:
            async with self._session().client("s3", endpoint_url=settings.s3_endpoint) as client:
                response = await client.get_object(Bucket=self.bucket, Key=key)
                async with response["Body"] as stream:
                    data = await stream.read()
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                raise ObjectNotFound(key) from exc
            logger.error("S3 download failed for %s/%s: %s", self.bucket, key, exc)
            raise StorageError("Failed to read file") from exc
        except BotoCoreError as exc:
            logger.error("S3 download failed for %s/%s: %s", self.bucket, key, exc)
            raise StorageError("Failed to read file") from exc
        return data, response.get("ContentType") or _guess_type(key)


def get_storage():
    if settings.storage_backend == "s3":
        return S3Storage()
    return LocalStorage()
