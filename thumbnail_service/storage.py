"""Thumbnail upload to S3-compatible object storage."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional
from urllib.parse import quote, urljoin
import uuid

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from . import config
from .errors import StoreError
from .imaging import JPEG_CONTENT_TYPE

logger = logging.getLogger(__name__)


def build_s3_client(settings: config.Settings):
    required = [
        settings.aws_access_key_id,
        settings.aws_secret_access_key,
        settings.thumbnail_bucket,
    ]
    if any(v is None for v in required):
        raise RuntimeError("Object store configuration is incomplete; check env vars.")
    session = boto3.session.Session()
    return session.client(
        service_name="s3",
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
        endpoint_url=settings.s3_endpoint,
        region_name=settings.aws_region,
        config=BotoConfig(
            signature_version="s3v4",
            connect_timeout=settings.connect_timeout_seconds,
            read_timeout=settings.request_timeout_seconds,
        ),
    )


class ArtifactStore:
    """
    Append-only thumbnail store.

    Every upload gets a fresh key, so repeated calls never overwrite each
    other, and nothing is ever deleted from here.
    """

    def __init__(
        self,
        client,
        bucket: str,
        key_prefix: str = "",
        public_base_url: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._bucket = bucket
        self._key_prefix = key_prefix
        self._public_base_url = public_base_url
        self._clock = clock

    def _new_key(self) -> str:
        millis = int(self._clock() * 1000)
        return f"{self._key_prefix}{millis}-{uuid.uuid4().hex}-thumbnail.jpg"

    def url_for(self, key: str) -> str:
        if self._public_base_url:
            # A leading "/" would make urljoin drop the base path.
            return urljoin(self._public_base_url.rstrip("/") + "/", quote(key.lstrip("/")))
        # Path-style URL on the configured endpoint
        endpoint = self._client.meta.endpoint_url.rstrip("/")
        return f"{endpoint}/{self._bucket}/{quote(key)}"

    def store(self, jpeg_bytes: bytes) -> str:
        key = self._new_key()
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=jpeg_bytes,
                ContentType=JPEG_CONTENT_TYPE,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StoreError(f"Upload of {key} to {self._bucket} failed: {exc}") from exc
        url = self.url_for(key)
        logger.debug("Stored thumbnail key=%s url=%s", key, url)
        return url
