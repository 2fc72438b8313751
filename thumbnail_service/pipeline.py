"""
Per-item thumbnail pipeline.

`process_item` is the unit of work used by both the HTTP API and the batch
worker. It keeps orchestration simple:
event -> fetch -> detect -> resize -> store -> catalog -> notify -> outcome.

Stages run strictly forward with no retries. Every stop condition comes back
as an `ItemOutcome`; only genuinely unexpected exceptions escape, and the
batch worker converts those at the item boundary.
"""

from __future__ import annotations

import logging

from .clients import PipelineClients
from .errors import CatalogError, ConflictError, FetchError, PublishError, StoreError, TransformError
from .imaging import ImageBytes, detect_format, make_thumbnail
from .models import CatalogRecord, CompletionEvent, InboundEvent, ItemOutcome, OutcomeReason, Stage

logger = logging.getLogger(__name__)


def _failed(event: InboundEvent, stage: Stage, reason: OutcomeReason, exc: Exception) -> ItemOutcome:
    logger.warning("Item %s failed at %s: %s (%s)", event.identity, stage.value, reason.value, exc)
    return ItemOutcome.failed(stage, reason, event.identity, str(exc))


def process_item(event: InboundEvent, clients: PipelineClients) -> ItemOutcome:
    identity = event.identity

    if not event.blob_url:
        logger.info("Item %s skipped: no blob URL provided", identity)
        return ItemOutcome.skipped(Stage.RECEIVED, OutcomeReason.MISSING_URL, identity)

    try:
        payload = clients.fetcher.fetch(event.blob_url)
    except FetchError as exc:
        return _failed(event, Stage.FETCHING, OutcomeReason.FETCH_ERROR, exc)

    try:
        source = ImageBytes(payload=payload, format=detect_format(payload))
    except TransformError as exc:
        return _failed(event, Stage.DETECTING, OutcomeReason.TRANSFORM_ERROR, exc)
    if source.format is None:
        logger.info("Item %s skipped: unsupported image format at %s", identity, event.blob_url)
        return ItemOutcome.skipped(Stage.DETECTING, OutcomeReason.UNSUPPORTED_FORMAT, identity)

    try:
        thumbnail = make_thumbnail(source, clients.width, clients.height, clients.quality)
    except TransformError as exc:
        return _failed(event, Stage.TRANSFORMING, OutcomeReason.TRANSFORM_ERROR, exc)

    try:
        image_url = clients.store.store(thumbnail.payload)
    except StoreError as exc:
        return _failed(event, Stage.STORING, OutcomeReason.STORE_ERROR, exc)
    logger.info("Thumbnail for %s uploaded: %s", identity, image_url)

    # The artifact is durable from here on; a catalog failure leaves it orphaned.
    record = CatalogRecord.from_event(event, image_url)
    try:
        clients.catalog.create(record)
    except ConflictError as exc:
        return _failed(event, Stage.CATALOGING, OutcomeReason.CONFLICT, exc)
    except CatalogError as exc:
        return _failed(event, Stage.CATALOGING, OutcomeReason.CATALOG_ERROR, exc)

    try:
        clients.publisher.publish(CompletionEvent.for_record(record))
    except PublishError as exc:
        logger.warning("Item %s completed but notification failed: %s", identity, exc)
        return ItemOutcome.completed(record, identity, warning=OutcomeReason.PUBLISH_ERROR, detail=str(exc))

    logger.info("Item %s completed (%s)", identity, source.format)
    return ItemOutcome.completed(record, identity)
