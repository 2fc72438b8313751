"""Catalog record persistence in DynamoDB."""

from __future__ import annotations

from decimal import Decimal
import logging

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from . import config
from .errors import CatalogError, ConflictError
from .models import CatalogRecord

logger = logging.getLogger(__name__)

# Create-only: never overwrite an existing (partitionKey, rowKey) entry.
_CREATE_ONLY = "attribute_not_exists(partitionKey) AND attribute_not_exists(rowKey)"


def build_catalog_table(settings: config.Settings):
    if settings.catalog_table is None:
        raise RuntimeError("Catalog configuration is incomplete; check env vars.")
    session = boto3.session.Session()
    resource = session.resource(
        service_name="dynamodb",
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
        endpoint_url=settings.dynamodb_endpoint,
        region_name=settings.aws_region,
        config=BotoConfig(
            connect_timeout=settings.connect_timeout_seconds,
            read_timeout=settings.request_timeout_seconds,
        ),
    )
    return resource.Table(settings.catalog_table)


def _to_item(record: CatalogRecord) -> dict:
    item = record.model_dump(by_alias=True)
    # DynamoDB rejects binary floats; go through str to keep 4.5 as 4.5.
    item["price"] = Decimal(str(record.price))
    return item


class CatalogWriter:
    def __init__(self, table) -> None:
        self._table = table

    def create(self, record: CatalogRecord) -> None:
        """
        Insert `record`; raises ConflictError if its key is already present.

        Any other store fault is raised as CatalogError.
        """
        try:
            self._table.put_item(Item=_to_item(record), ConditionExpression=_CREATE_ONLY)
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code == "ConditionalCheckFailedException":
                raise ConflictError(
                    f"Catalog entry {record.partition_key}/{record.row_key} already exists"
                ) from exc
            raise CatalogError(f"Catalog write failed: {exc}") from exc
        except BotoCoreError as exc:
            raise CatalogError(f"Catalog write failed: {exc}") from exc
