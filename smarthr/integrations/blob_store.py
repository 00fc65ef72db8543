from __future__ import annotations

import asyncio
import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

from botocore.exceptions import BotoCoreError, ClientError

from smarthr.integrations.errors import UpstreamServiceError
from smarthr.schemas.documents import BlobLocation

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class BlobStore(Protocol):
    async def put(self, key: str, content: bytes, content_type: str) -> BlobLocation: ...

    async def get(self, location: BlobLocation) -> bytes: ...


def build_blob_key(category: str, filename: str, now: datetime | None = None) -> str:
    """``{category}/{timestamp}_{originalFilename}`` with the filename made path-safe."""
    moment = now or datetime.now(timezone.utc)
    timestamp = int(moment.timestamp() * 1000)
    base = os.path.basename(filename or "") or "upload"
    safe = _UNSAFE_FILENAME_CHARS.sub("_", base).strip("._") or "upload"
    return f"{category}/{timestamp}_{safe}"


class S3BlobStore:
    def __init__(self, bucket: str, region: str, client: Any | None = None):
        self._bucket = bucket
        self._region = region
        if client is None:
            import boto3
            from botocore.config import Config

            client = boto3.client("s3", region_name=region, config=Config(signature_version="s3v4"))
        self._client = client

    def _url_for(self, key: str) -> str:
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{key}"

    async def put(self, key: str, content: bytes, content_type: str) -> BlobLocation:
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self._bucket,
                Key=key,
                Body=content,
                ContentType=content_type or "application/octet-stream",
            )
        except (BotoCoreError, ClientError) as exc:
            logger.warning("blob_put_failed backend=s3 key=%s: %s", key, exc)
            raise UpstreamServiceError("s3", str(exc)) from exc
        logger.info("blob_put backend=s3 key=%s bytes=%s", key, len(content))
        return BlobLocation(key=key, url=self._url_for(key), bucket=self._bucket)

    async def get(self, location: BlobLocation) -> bytes:
        try:
            response = await asyncio.to_thread(
                self._client.get_object,
                Bucket=location.bucket or self._bucket,
                Key=location.key,
            )
            return await asyncio.to_thread(response["Body"].read)
        except (BotoCoreError, ClientError) as exc:
            logger.warning("blob_get_failed backend=s3 key=%s: %s", location.key, exc)
            raise UpstreamServiceError("s3", str(exc)) from exc


class LocalBlobStore:
    """Directory-backed store for development; its locations never support async OCR."""

    def __init__(self, root: str):
        self._root = Path(root)

    def _path_for(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if self._root.resolve() not in path.parents:
            raise UpstreamServiceError("local_blob", f"key escapes blob root: {key}")
        return path

    def _write(self, path: Path, content: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    async def put(self, key: str, content: bytes, content_type: str) -> BlobLocation:
        path = self._path_for(key)
        try:
            await asyncio.to_thread(self._write, path, content)
        except OSError as exc:
            raise UpstreamServiceError("local_blob", str(exc)) from exc
        logger.info("blob_put backend=local key=%s bytes=%s", key, len(content))
        return BlobLocation(key=key, url=path.as_uri())

    async def get(self, location: BlobLocation) -> bytes:
        try:
            return await asyncio.to_thread(self._path_for(location.key).read_bytes)
        except OSError as exc:
            raise UpstreamServiceError("local_blob", str(exc)) from exc
