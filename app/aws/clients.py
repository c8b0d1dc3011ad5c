import logging
import boto3
from botocore.exceptions import ClientError
from ..core.config import settings

logger = logging.getLogger(__name__)

MEMORY_INDEX = "by_memory_created"

def _resource():
    return boto3.resource(
        "dynamodb",
        region_name=settings.aws_region,
        endpoint_url=settings.aws_endpoint_url,
        aws_access_key_id=settings.aws_access_key_id,
        aws_secret_access_key=settings.aws_secret_access_key,
    )

def dynamodb_table():
    """Return a DynamoDB Table handle for the configured photos table."""
    return _resource().Table(settings.table_name)

def ensure_table() -> bool:
    """Create the photos table and its memory index if it is missing.

    Returns True when the table was created by this call.
    """
    dynamodb = _resource()
    try:
        dynamodb.meta.client.describe_table(TableName=settings.table_name)
        return False
    except ClientError as e:
        if e.response.get("Error", {}).get("Code") != "ResourceNotFoundException":
            raise

    table = dynamodb.create_table(
        TableName=settings.table_name,
        AttributeDefinitions=[
            {"AttributeName": "photo_id", "AttributeType": "S"},
            {"AttributeName": "memory_id", "AttributeType": "S"},
            {"AttributeName": "created_at", "AttributeType": "N"},
        ],
        KeySchema=[{"AttributeName": "photo_id", "KeyType": "HASH"}],
        BillingMode="PAY_PER_REQUEST",
        GlobalSecondaryIndexes=[
            {
                "IndexName": MEMORY_INDEX,
                "KeySchema": [
                    {"AttributeName": "memory_id", "KeyType": "HASH"},
                    {"AttributeName": "created_at", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            }
        ],
    )
    table.wait_until_exists()
    logger.info(f"Created DynamoDB table {settings.table_name}")
    return True
