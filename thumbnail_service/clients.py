"""
Process-wide collaborator handles.

The loader:
 - builds the fetcher, object store, catalog and publisher clients,
 - keeps a single shared instance per process,
 - exposes `get_clients()` for the batch entry points.

The handles are only read after construction, so one instance is shared by
every worker thread.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from threading import Lock
from typing import Optional

import requests

from . import config
from .catalog import CatalogWriter, build_catalog_table
from .fetcher import ImageFetcher
from .imaging import DEFAULT_QUALITY, DEFAULT_SIZE
from .publisher import NotificationPublisher
from .storage import ArtifactStore, build_s3_client

logger = logging.getLogger(__name__)

_CLIENTS: Optional["PipelineClients"] = None
_LOCK = Lock()


@dataclass(frozen=True)
class PipelineClients:
    fetcher: ImageFetcher
    store: ArtifactStore
    catalog: CatalogWriter
    publisher: NotificationPublisher
    width: int = DEFAULT_SIZE
    height: int = DEFAULT_SIZE
    quality: int = DEFAULT_QUALITY


def build_clients(settings: config.Settings) -> PipelineClients:
    if settings.notification_endpoint is None:
        raise RuntimeError("Notification configuration is incomplete; check env vars.")

    session = requests.Session()
    s3 = build_s3_client(settings)
    return PipelineClients(
        fetcher=ImageFetcher(
            session, settings.timeout, settings.max_image_bytes, settings.fetch_deadline_seconds
        ),
        store=ArtifactStore(
            s3,
            settings.thumbnail_bucket,
            key_prefix=settings.thumbnail_key_prefix,
            public_base_url=settings.public_base_url,
        ),
        catalog=CatalogWriter(build_catalog_table(settings)),
        publisher=NotificationPublisher(
            settings.notification_endpoint,
            settings.notification_access_key,
            session=requests.Session(),
            timeout=settings.timeout,
        ),
        width=settings.thumbnail_width,
        height=settings.thumbnail_height,
        quality=settings.jpeg_quality,
    )


def get_clients() -> PipelineClients:
    """
    Return the singleton collaborator bundle.

    Built once on first access; never rebuilt per item or per batch.
    """
    global _CLIENTS
    if _CLIENTS is not None:
        return _CLIENTS

    with _LOCK:
        if _CLIENTS is None:
            settings = config.get_settings()
            _CLIENTS = build_clients(settings)
            logger.info(
                "Pipeline clients ready bucket=%s table=%s",
                settings.thumbnail_bucket,
                settings.catalog_table,
            )
    return _CLIENTS
