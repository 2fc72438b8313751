"""Source image download over HTTP."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Tuple

import requests

from .errors import FetchError

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


class ImageFetcher:
    """
    Downloads source images with a bounded timeout.

    `timeout` bounds each socket operation; `deadline` (default: connect +
    read) bounds the whole download, so a server trickling bytes cannot hold
    a worker indefinitely.

    No retries: a failed download is reported to the caller as `FetchError`
    and the stream's redelivery is the only retry path.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: Tuple[float, float] = (5.0, 30.0),
        max_bytes: Optional[int] = None,
        deadline: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._session = session or requests.Session()
        self._timeout = timeout
        self._max_bytes = max_bytes
        self._deadline = deadline if deadline is not None else sum(timeout)
        self._clock = clock

    def fetch(self, url: str) -> bytes:
        expires_at = self._clock() + self._deadline
        try:
            with self._session.get(url, timeout=self._timeout, stream=True) as resp:
                resp.raise_for_status()
                return self._read_body(resp, url, expires_at)
        except requests.RequestException as exc:
            raise FetchError(f"Could not download {url}: {exc}") from exc

    def _read_body(self, resp: requests.Response, url: str, expires_at: float) -> bytes:
        buf = bytearray()
        for chunk in resp.iter_content(chunk_size=_CHUNK_SIZE):
            buf.extend(chunk)
            if self._max_bytes is not None and len(buf) > self._max_bytes:
                raise FetchError(f"Image at {url} exceeds {self._max_bytes} bytes")
            if self._clock() > expires_at:
                raise FetchError(f"Download of {url} timed out after {self._deadline}s")
        return bytes(buf)
