from __future__ import annotations

from dataclasses import dataclass
import logging
from urllib.parse import urlparse

import boto3
from botocore.config import Config

from .settings import settings

logger = logging.getLogger("storage")

@dataclass(frozen=True)
class StorageConfig:
    endpoint_url: str
    bucket: str
    region: str | None
    public_base_url: str | None

_logged_config = False


def get_storage_config() -> StorageConfig:
    global _logged_config
    if settings.STORAGE_BACKEND != "object":
        raise RuntimeError("Object storage is not enabled")
    if not all([settings.OBJECT_STORAGE_ENDPOINT, settings.OBJECT_STORAGE_BUCKET]):
        raise RuntimeError("Missing object storage configuration")
    cfg = StorageConfig(
        endpoint_url=settings.OBJECT_STORAGE_ENDPOINT or "",
        bucket=(settings.OBJECT_STORAGE_BUCKET or "").strip(),
        region=settings.OBJECT_STORAGE_REGION,
        public_base_url=settings.OBJECT_STORAGE_PUBLIC_BASE_URL,
    )
    if not _logged_config:
        logger.info(
            "Object storage config loaded: endpoint=%s bucket=%s public_base=%s",
            cfg.endpoint_url,
            cfg.bucket,
            cfg.public_base_url or "",
        )
        _logged_config = True
    return cfg

def get_s3_client(cfg: StorageConfig):
    return boto3.client(
        "s3",
        endpoint_url=cfg.endpoint_url,
        region_name=cfg.region,
        config=Config(s3={"addressing_style": "path"}),
    )

def get_public_url(cfg: StorageConfig, *, key: str) -> str:
    if cfg.public_base_url:
        return f"{cfg.public_base_url.rstrip('/')}/{key}"
    return f"{cfg.endpoint_url.rstrip('/')}/{cfg.bucket}/{key}"


def extract_key_from_url(cfg: StorageConfig, url: str) -> str | None:
    if not url:
        return None
    if url.startswith("tickets/"):
        return url

    base = (cfg.public_base_url or "").rstrip("/")
    if base and url.startswith(base + "/"):
        return url[len(base) + 1 :]

    endpoint = cfg.endpoint_url.rstrip("/")
    bucket = cfg.bucket.strip("/")
    if endpoint and bucket:
        prefix = f"{endpoint}/{bucket}/"
        if url.startswith(prefix):
            return url[len(prefix) :]

    path = urlparse(url).path.lstrip("/")
    if bucket and path.startswith(bucket + "/"):
        return path[len(bucket) + 1 :]
    return None
