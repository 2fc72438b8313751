"""
Wire and result models for the thumbnail pipeline.

Inbound events and catalog/notification payloads are pydantic models so that
camelCase wire names and string-typed numbers are handled in one place. Item
outcomes are plain dataclasses: they never leave the process except through
the API layer, which re-serializes them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional
import uuid

from pydantic import BaseModel, ConfigDict, Field

PRODUCT_CREATED = "ProductCreated"
DATA_VERSION = "1.0"


class InboundEvent(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    brand: str
    price: Decimal
    quantity_available: int = Field(alias="quantityAvailable")
    blob_url: Optional[str] = Field(None, alias="blobUrl")

    @property
    def identity(self) -> str:
        return f"{self.brand}/{self.name}"


class CatalogRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    partition_key: str = Field(alias="partitionKey")
    row_key: str = Field(alias="rowKey")
    name: str
    brand: str
    price: float
    quantity_available: int = Field(alias="quantityAvailable")
    image_url: str = Field(alias="imageUrl")

    @classmethod
    def from_event(cls, event: InboundEvent, image_url: str) -> "CatalogRecord":
        return cls(
            partition_key=event.brand,
            row_key=event.name,
            name=event.name,
            brand=event.brand,
            price=float(event.price),
            quantity_available=event.quantity_available,
            image_url=image_url,
        )


class CompletionEvent(BaseModel):
    """Event-topic envelope announcing a newly catalogued product."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_type: str = Field(PRODUCT_CREATED, alias="eventType")
    subject: str
    data_version: str = Field(DATA_VERSION, alias="dataVersion")
    event_time: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="eventTime"
    )
    data: CatalogRecord

    @classmethod
    def for_record(cls, record: CatalogRecord) -> "CompletionEvent":
        return cls(subject=f"Products/{record.brand}/{record.name}", data=record)


class OutcomeStatus(str, Enum):
    SKIPPED = "skipped"
    FAILED = "failed"
    COMPLETED = "completed"


class OutcomeReason(str, Enum):
    MISSING_URL = "MissingUrl"
    UNSUPPORTED_FORMAT = "UnsupportedFormat"
    FETCH_ERROR = "FetchError"
    TRANSFORM_ERROR = "TransformError"
    STORE_ERROR = "StoreError"
    CONFLICT = "Conflict"
    CATALOG_ERROR = "CatalogError"
    PUBLISH_ERROR = "PublishError"
    INTERNAL_ERROR = "InternalError"
    INVALID_EVENT = "InvalidEvent"


class Stage(str, Enum):
    RECEIVED = "received"
    FETCHING = "fetching"
    DETECTING = "detecting"
    TRANSFORMING = "transforming"
    STORING = "storing"
    CATALOGING = "cataloging"
    NOTIFYING = "notifying"


@dataclass(frozen=True)
class ItemOutcome:
    status: OutcomeStatus
    stage: Optional[Stage]  # None when the failing stage is unknown
    identity: Optional[str] = None
    reason: Optional[OutcomeReason] = None
    detail: Optional[str] = None
    record: Optional[CatalogRecord] = None

    @classmethod
    def skipped(cls, stage: Stage, reason: OutcomeReason, identity: Optional[str], detail: Optional[str] = None):
        return cls(OutcomeStatus.SKIPPED, stage, identity, reason, detail)

    @classmethod
    def failed(cls, stage: Optional[Stage], reason: OutcomeReason, identity: Optional[str], detail: Optional[str] = None):
        return cls(OutcomeStatus.FAILED, stage, identity, reason, detail)

    @classmethod
    def completed(
        cls,
        record: CatalogRecord,
        identity: str,
        warning: Optional[OutcomeReason] = None,
        detail: Optional[str] = None,
    ):
        return cls(OutcomeStatus.COMPLETED, Stage.NOTIFYING, identity, warning, detail, record)

    @property
    def image_url(self) -> Optional[str]:
        return self.record.image_url if self.record else None

    @property
    def warning(self) -> Optional[OutcomeReason]:
        """Completed items carry their publish failure here; it is never fatal."""
        return self.reason if self.status is OutcomeStatus.COMPLETED else None
