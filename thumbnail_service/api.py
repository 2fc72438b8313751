"""
FastAPI layer for push-style batch delivery.

Endpoints:
 - GET /health
 - POST /events
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI
from pydantic import BaseModel

from . import config
from .models import ItemOutcome
from .queue_worker import process_batch, summarize

settings = config.get_settings()
logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = FastAPI(title="Product Thumbnail Service", version="0.1.0")


class OutcomeResponse(BaseModel):
    status: str
    stage: Optional[str] = None
    identity: Optional[str] = None
    reason: Optional[str] = None
    detail: Optional[str] = None
    imageUrl: Optional[str] = None


class BatchResponse(BaseModel):
    summary: Dict[str, Any]
    outcomes: List[OutcomeResponse]


def _to_response(outcome: ItemOutcome) -> OutcomeResponse:
    return OutcomeResponse(
        status=outcome.status.value,
        stage=outcome.stage.value if outcome.stage else None,
        identity=outcome.identity,
        reason=outcome.reason.value if outcome.reason else None,
        detail=outcome.detail,
        imageUrl=outcome.image_url,
    )


@app.get("/health")
def health():
    return {"status": "ok"}


@app.post("/events", response_model=BatchResponse)
def receive_events(body: List[Dict[str, Any]]):
    # Raw dicts: validation happens per item so one bad event cannot reject the batch.
    outcomes = process_batch(body)
    return BatchResponse(
        summary=summarize(outcomes),
        outcomes=[_to_response(o) for o in outcomes],
    )
