import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Protocol

import httpx
import structlog

from imagegen.config import Settings, settings
from imagegen.core.exceptions import StorageError, ValidationError
from imagegen.schemas.images import BlobListResult, BlobObject, PutBlobResult
from imagegen.services.http_client import get_http_client

logger = structlog.get_logger()

EXT_TO_MEDIA_TYPE = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}


def generate_blob_name(ext: str = "jpg") -> str:
    return f"{uuid.uuid4()}.{ext}"


def validate_blob_name(name: str) -> None:
    if not name or ".." in name or "/" in name or "\\" in name:
        raise ValidationError("Invalid blob name")


class BlobStore(Protocol):
    async def put(
        self, name: str, data: bytes, *, access: str = "public", content_type: str | None = None
    ) -> PutBlobResult: ...

    async def list(self) -> BlobListResult: ...


class LocalBlobStore:
    """Blob store backed by a directory; objects are served by the app under ``/images/{name}``."""

    def __init__(self, root: Path, base_url: str) -> None:
        self.root = root
        self.base_url = base_url.rstrip("/")

    def get_url(self, name: str) -> str:
        return f"{self.base_url}/images/{name}"

    def get_path(self, name: str) -> tuple[Path, str] | None:
        validate_blob_name(name)
        path = self.root / name
        if not path.is_file():
            return None
        ext = path.suffix.lstrip(".").lower()
        return path, EXT_TO_MEDIA_TYPE.get(ext, "application/octet-stream")

    async def put(
        self, name: str, data: bytes, *, access: str = "public", content_type: str | None = None
    ) -> PutBlobResult:
        validate_blob_name(name)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            (self.root / name).write_bytes(data)
        except OSError as e:
            logger.error("blob_put_failed", backend="local", name=name, error=str(e))
            raise StorageError(f"Failed to store blob {name}: {e}") from e
        logger.info("blob_stored", backend="local", name=name, size=len(data))
        return PutBlobResult(url=self.get_url(name), pathname=name, content_type=content_type)

    async def list(self) -> BlobListResult:
        if not self.root.exists():
            return BlobListResult()
        blobs = []
        try:
            for path in sorted(self.root.iterdir()):
                if not path.is_file():
                    continue
                stat = path.stat()
                blobs.append(
                    BlobObject(
                        url=self.get_url(path.name),
                        pathname=path.name,
                        content_type=EXT_TO_MEDIA_TYPE.get(path.suffix.lstrip(".").lower()),
                        size=stat.st_size,
                        uploaded_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                    )
                )
        except OSError as e:
            logger.error("blob_list_failed", backend="local", error=str(e))
            raise StorageError(f"Failed to list blobs: {e}") from e
        return BlobListResult(blobs=blobs)


class VercelBlobStore:
    """Client for the hosted blob REST API (``PUT /<pathname>``, ``GET /``)."""

    def __init__(self, api_url: str, token: str, api_version: str = "7") -> None:
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.api_version = api_version

    def _headers(self) -> dict[str, str]:
        return {
            "authorization": f"Bearer {self.token}",
            "x-api-version": self.api_version,
        }

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            payload = response.json()
            error = payload.get("error") if isinstance(payload, dict) else None
            message = error.get("message") if isinstance(error, dict) else error
        except ValueError:
            message = None
        return str(message) if message else response.text

    async def put(
        self, name: str, data: bytes, *, access: str = "public", content_type: str | None = None
    ) -> PutBlobResult:
        validate_blob_name(name)
        headers = self._headers()
        headers["x-vercel-blob-access"] = access
        headers["x-add-random-suffix"] = "0"
        if content_type:
            headers["x-content-type"] = content_type
        try:
            response = await get_http_client().put(f"{self.api_url}/{name}", content=data, headers=headers)
        except Exception as e:
            logger.error("blob_put_failed", backend="vercel", name=name, error=str(e))
            raise StorageError(f"Blob store request failed: {e}") from e
        if not response.is_success:
            message = self._error_message(response)
            logger.error("blob_put_failed", backend="vercel", name=name, status=response.status_code, error=message)
            raise StorageError(f"Blob store error! Status: {response.status_code}, Message: {message}")
        result = PutBlobResult.model_validate(response.json())
        logger.info("blob_stored", backend="vercel", name=name, url=result.url)
        return result

    async def list(self) -> BlobListResult:
        try:
            response = await get_http_client().get(self.api_url, headers=self._headers())
        except Exception as e:
            logger.error("blob_list_failed", backend="vercel", error=str(e))
            raise StorageError(f"Blob store request failed: {e}") from e
        if not response.is_success:
            message = self._error_message(response)
            logger.error("blob_list_failed", backend="vercel", status=response.status_code, error=message)
            raise StorageError(f"Blob store error! Status: {response.status_code}, Message: {message}")
        return BlobListResult.model_validate(response.json())


def create_blob_store(config: Settings = settings) -> BlobStore:
    if config.blob_backend == "vercel":
        if not config.blob_read_write_token:
            logger.warning("blob_token_missing")
        return VercelBlobStore(config.blob_api_url, config.blob_read_write_token, config.blob_api_version)
    return LocalBlobStore(Path(config.uploads_path) / "images", config.public_base_url)
