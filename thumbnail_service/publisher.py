"""Completion notifications posted to an HTTP event-topic endpoint."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import requests

from .errors import PublishError
from .models import CompletionEvent

logger = logging.getLogger(__name__)

ACCESS_KEY_HEADER = "aeg-sas-key"


class NotificationPublisher:
    def __init__(
        self,
        endpoint: str,
        access_key: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Tuple[float, float] = (5.0, 30.0),
    ) -> None:
        self._endpoint = endpoint
        self._session = session or requests.Session()
        self._timeout = timeout
        self._headers = {"Content-Type": "application/json"}
        if access_key:
            self._headers[ACCESS_KEY_HEADER] = access_key

    def publish(self, event: CompletionEvent) -> None:
        """Post a single event; the endpoint accepts a JSON array."""
        payload = [event.model_dump(mode="json", by_alias=True)]
        try:
            resp = self._session.post(
                self._endpoint, json=payload, headers=self._headers, timeout=self._timeout
            )
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise PublishError(f"Publishing {event.subject} failed: {exc}") from exc
        logger.debug("Published %s id=%s", event.event_type, event.id)
