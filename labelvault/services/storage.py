"""Object storage for release artwork and audio masters."""

import asyncio
import logging
import re
from typing import Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from labelvault.core.exceptions import DependencyFailure
from labelvault.core.settings import get_settings

logger = logging.getLogger(__name__)

# S3 DeleteObjects accepts at most this many keys per call
DELETE_BATCH_SIZE = 1000


def build_object_key(path: str, file_name: str) -> str:
    """Join a folder and file name into a key without duplicate slashes."""
    return re.sub(r"/+", "/", f"{path}/{file_name}").lstrip("/")


def release_prefix(release_id: str) -> str:
    """Folder holding every stored asset of a release; uploads are filed here by id."""
    return f"releases/{release_id}/"


def release_audio_prefix(release_id: str) -> str:
    return f"{release_prefix(release_id)}audio/"


class AssetStore:
    """Interface shared by the storage backends."""

    backend = "base"

    async def upload_file(
        self, data: bytes, path: str, file_name: str, content_type: Optional[str] = None
    ) -> str:
        """Store an object and return its public URL."""
        raise NotImplementedError

    async def delete_prefix(self, prefix: str) -> int:
        """Delete every object whose key starts with ``prefix``; return the count."""
        raise NotImplementedError

    def public_url(self, key: str) -> str:
        raise NotImplementedError


class S3AssetStore(AssetStore):
    """S3 compatible storage (AWS S3, Cloudflare R2, Backblaze B2)."""

    backend = "s3"

    def __init__(
        self,
        bucket: str,
        endpoint_url: Optional[str] = None,
        public_base_url: Optional[str] = None,
        client=None,
    ):
        settings = get_settings()
        self.bucket = bucket
        self.endpoint_url = endpoint_url
        self.public_base_url = (public_base_url or "").rstrip("/")
        self.client = client or boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            region_name=settings.aws_region,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )
        logger.info(f"S3 asset store initialised for bucket {bucket}")

    def public_url(self, key: str) -> str:
        if self.public_base_url:
            return f"{self.public_base_url}/{key}"
        base = (self.endpoint_url or "https://s3.amazonaws.com").rstrip("/")
        return f"{base}/{self.bucket}/{key}"

    async def upload_file(
        self, data: bytes, path: str, file_name: str, content_type: Optional[str] = None
    ) -> str:
        key = build_object_key(path, file_name)
        params = {
            "Bucket": self.bucket,
            "Key": key,
            "Body": data,
            "CacheControl": "public, max-age=31536000, immutable",
        }
        if content_type:
            params["ContentType"] = content_type

        try:
            await asyncio.to_thread(self.client.put_object, **params)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Upload of {key} failed: {e}")
            raise DependencyFailure(f"Storage upload failed: {e}")

        logger.info(f"Uploaded {key} ({len(data)} bytes)")
        return self.public_url(key)

    async def delete_prefix(self, prefix: str) -> int:
        try:
            keys = await asyncio.to_thread(self._list_keys, prefix)
            for start in range(0, len(keys), DELETE_BATCH_SIZE):
                batch = keys[start:start + DELETE_BATCH_SIZE]
                await asyncio.to_thread(
                    self.client.delete_objects,
                    Bucket=self.bucket,
                    Delete={"Objects": [{"Key": k} for k in batch], "Quiet": True},
                )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Purge of {prefix} failed: {e}")
            raise DependencyFailure(f"Storage purge failed: {e}")

        logger.info(f"Purged {len(keys)} objects under {prefix}")
        return len(keys)

    def _list_keys(self, prefix: str) -> List[str]:
        keys = []
        paginator = self.client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket, Prefix=prefix):
            keys.extend(obj["Key"] for obj in page.get("Contents", []))
        return keys


class MemoryAssetStore(AssetStore):
    """In-process storage for development and tests."""

    backend = "memory"

    def __init__(self, public_base_url: str = "https://assets.local"):
        self.public_base_url = public_base_url.rstrip("/")
        self.objects: Dict[str, bytes] = {}
        self.deleted_prefixes: List[str] = []

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    async def upload_file(
        self, data: bytes, path: str, file_name: str, content_type: Optional[str] = None
    ) -> str:
        key = build_object_key(path, file_name)
        self.objects[key] = data
        logger.info(f"MOCK STORAGE: stored {key}")
        return self.public_url(key)

    async def delete_prefix(self, prefix: str) -> int:
        doomed = [key for key in self.objects if key.startswith(prefix)]
        for key in doomed:
            del self.objects[key]
        self.deleted_prefixes.append(prefix)
        logger.info(f"MOCK STORAGE: purged {len(doomed)} objects under {prefix}")
        return len(doomed)


_asset_store: Optional[AssetStore] = None


def get_asset_store() -> AssetStore:
    """Get the configured asset store instance."""
    global _asset_store
    if _asset_store is None:
        settings = get_settings()
        if settings.storage_backend == "s3":
            if not settings.s3_bucket:
                raise DependencyFailure("S3 storage selected but no bucket configured")
            _asset_store = S3AssetStore(
                bucket=settings.s3_bucket,
                endpoint_url=settings.s3_endpoint_url,
                public_base_url=settings.storage_public_base_url,
            )
        else:
            _asset_store = MemoryAssetStore(settings.storage_public_base_url or "https://assets.local")
    return _asset_store
