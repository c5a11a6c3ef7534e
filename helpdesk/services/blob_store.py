from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from ..core import storage
from ..core.settings import settings

logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    def upload(self, path_hint: str, data: bytes, content_type: str) -> str: ...

    def delete(self, url: str) -> None: ...


class ObjectBlobStore:
    """S3 compatible bucket, addressed path-style."""

    def __init__(self, cfg: storage.StorageConfig | None = None, client=None):
        self.cfg = cfg or storage.get_storage_config()
        self.client = client or storage.get_s3_client(self.cfg)

    def upload(self, path_hint: str, data: bytes, content_type: str) -> str:
        self.client.put_object(
            Bucket=self.cfg.bucket,
            Key=path_hint,
            Body=data,
            ContentType=content_type,
        )
        return storage.get_public_url(self.cfg, key=path_hint)

    def delete(self, url: str) -> None:
        key = storage.extract_key_from_url(self.cfg, url)
        if not key:
            logger.warning("Not an object storage url, skipping delete: %s", url)
            return
        self.client.delete_object(Bucket=self.cfg.bucket, Key=key)


class LocalBlobStore:
    """Files under a local directory, served from a public prefix."""

    def __init__(self, root: str | Path, public_base_url: str = "/uploads"):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _path_for(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if not path.is_relative_to(self.root.resolve()):
            raise ValueError(f"Key escapes upload root: {key}")
        return path

    def upload(self, path_hint: str, data: bytes, content_type: str) -> str:
        path = self._path_for(path_hint)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return f"{self.public_base_url}/{path_hint}"

    def delete(self, url: str) -> None:
        prefix = self.public_base_url + "/"
        if not url.startswith(prefix):
            logger.warning("Not a local upload url, skipping delete: %s", url)
            return
        self._path_for(url[len(prefix):]).unlink(missing_ok=True)


def get_blob_store() -> BlobStore:
    if settings.STORAGE_BACKEND == "object":
        return ObjectBlobStore()
    return LocalBlobStore(settings.LOCAL_UPLOAD_ROOT, settings.PUBLIC_UPLOAD_BASE_URL)
