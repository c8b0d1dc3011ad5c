from typing import Optional, List, Dict, Any
import time
import uuid
from decimal import Decimal
from boto3.dynamodb.conditions import Key, Attr
from ..core.models import ProcessedImage
from .clients import MEMORY_INDEX, dynamodb_table as dynamodb_table_factory

"""Helpers for putting, listing, fetching and deleting memory photo records.
"""


def _plain(value):
    # DynamoDB hands numbers back as Decimal
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def put_photo_record(
    *,
    user_id: str,
    memory_id: str,
    filename: str,
    processed: ProcessedImage,
) -> Dict[str, Any]:
    """Persist one processed photo and return the stored item."""
    if not user_id or not memory_id or not processed.processed_path:
        raise ValueError("missing_required_fields")

    item: Dict[str, Any] = {
        "photo_id": uuid.uuid4().hex,
        "user_id": str(user_id),
        "memory_id": str(memory_id),
        "created_at": int(time.time()),
        "filename": filename,
        "content_type": "image/webp",
        "size": processed.metadata.size,
        "path": processed.processed_path,
        "metadata": processed.metadata.model_dump(),
    }

    dynamodb_table_factory().put_item(Item=item)
    return item


def get_photo_record(photo_id: str) -> Dict[str, Any]:
    resp = dynamodb_table_factory().get_item(Key={"photo_id": photo_id})
    item = resp.get("Item")
    if not item:
        raise KeyError("not_found")
    return _plain(item)


def list_photo_records(memory_id: str, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
    """List the photos of one memory, oldest first.

    If `user_id` is provided only that user's photos are returned.
    """
    table = dynamodb_table_factory()

    items: List[Dict[str, Any]] = []
    exclusive_start_key = None

    while True:
        params: Dict[str, Any] = {
            "IndexName": MEMORY_INDEX,
            "KeyConditionExpression": Key("memory_id").eq(str(memory_id)),
        }
        if user_id:
            params["FilterExpression"] = Attr("user_id").eq(str(user_id))
        if exclusive_start_key is not None:
            params["ExclusiveStartKey"] = exclusive_start_key

        resp = table.query(**params)
        items.extend(resp.get("Items", []))
        exclusive_start_key = resp.get("LastEvaluatedKey")
        if not exclusive_start_key:
            break

    return [_plain(i) for i in items]


def delete_photo_record(photo_id: str) -> Dict[str, Any]:
    """Delete the record and return the item as it was stored."""
    resp = dynamodb_table_factory().delete_item(
        Key={"photo_id": photo_id},
        ReturnValues="ALL_OLD",
    )
    item = resp.get("Attributes")
    if not item:
        raise KeyError("not_found")
    return _plain(item)
