"""
Batch worker for stream-delivered product events.

The stream subsystem (Kafka consumer, Event Hub trigger, HTTP push, ...)
hands `process_batch` one batch at a time and acknowledges it once the call
returns. The worker itself never raises for a bad item: each one ends in an
`ItemOutcome`, returned in the same order as the input.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
import json
import logging
from typing import Any, Iterable, List, Optional, Union

from pydantic import ValidationError

from . import config
from .clients import PipelineClients, get_clients
from .models import InboundEvent, ItemOutcome, OutcomeReason, Stage
from .pipeline import process_item

logger = logging.getLogger(__name__)

RawEvent = Union[InboundEvent, dict, str, bytes]


def _parse(raw: RawEvent) -> InboundEvent:
    if isinstance(raw, InboundEvent):
        return raw
    if isinstance(raw, (str, bytes)):
        return InboundEvent.model_validate_json(raw)
    return InboundEvent.model_validate(raw)


def _missing_url(raw: RawEvent) -> Optional[ItemOutcome]:
    """Skip events without a blobUrl before validating anything else."""
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            return None
    if not isinstance(raw, Mapping) or raw.get("blobUrl"):
        return None
    identity = f"{raw.get('brand')}/{raw.get('name')}"
    logger.info("Item %s skipped: no blob URL provided", identity)
    return ItemOutcome.skipped(Stage.RECEIVED, OutcomeReason.MISSING_URL, identity)


def _process_one(raw: RawEvent, clients: PipelineClients) -> ItemOutcome:
    """Item boundary: nothing raised in here reaches sibling items."""
    skipped = _missing_url(raw)
    if skipped is not None:
        return skipped

    try:
        event = _parse(raw)
    except ValidationError as exc:
        logger.warning("Rejected malformed event: %s", exc.errors(include_url=False))
        return ItemOutcome.failed(Stage.RECEIVED, OutcomeReason.INVALID_EVENT, None, str(exc))

    try:
        return process_item(event, clients)
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected failure processing %s", event.identity)
        return ItemOutcome.failed(None, OutcomeReason.INTERNAL_ERROR, event.identity, repr(exc))


def summarize(outcomes: Iterable[ItemOutcome]) -> dict[str, Any]:
    """Counts per status and per reason, for logs and API responses."""
    outcomes = list(outcomes)
    statuses = Counter(o.status.value for o in outcomes)
    reasons = Counter(o.reason.value for o in outcomes if o.reason is not None)
    return {"total": len(outcomes), "statuses": dict(statuses), "reasons": dict(reasons)}


def process_batch(
    events: Iterable[RawEvent],
    clients: Optional[PipelineClients] = None,
    max_workers: Optional[int] = None,
) -> List[ItemOutcome]:
    """
    Process a batch of events with a bounded worker pool.

    Returns one outcome per input event, matching the input order. The pool
    is joined before returning, so in-flight items always reach a terminal
    state even when the host is shutting down.
    """
    items = list(events)
    if not items:
        return []

    clients = clients or get_clients()
    workers = max_workers or config.get_settings().max_concurrency
    workers = max(1, min(workers, len(items)))
    logger.info("Processing batch of %d events with %d workers", len(items), workers)

    if workers == 1:
        outcomes = [_process_one(raw, clients) for raw in items]
    else:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="thumbnail") as pool:
            futures = [pool.submit(_process_one, raw, clients) for raw in items]
            outcomes = [future.result() for future in futures]

    logger.info("Batch finished: %s", summarize(outcomes))
    return outcomes
