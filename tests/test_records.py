import os, sys

import pytest
from moto import mock_aws

# Ensure project root on path for `import app...`
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app.core.config import settings
from app.core.models import ImageMetadata, ProcessedImage
from app.aws import records
from app.aws.clients import ensure_table, dynamodb_table as dynamodb_table_factory


@pytest.fixture
def aws_mock(monkeypatch):
    with mock_aws():
        # Ensure our clients do not try to hit a custom endpoint in tests
        monkeypatch.setattr(settings, "aws_endpoint_url", None)
        monkeypatch.setattr(settings, "aws_region", "us-east-1")
        monkeypatch.setattr(settings, "table_name", "MemoryPhotos")
        assert ensure_table() is True
        yield


def _processed(path="/tmp/x.webp", size=123):
    return ProcessedImage(
        processed_path=path,
        metadata=ImageMetadata(width=30, height=20, original_format="jpeg", size=size),
    )


def test_ensure_table_only_creates_once(aws_mock):
    assert ensure_table() is False


def test_put_get_delete_flow_success(aws_mock, monkeypatch):
    # Freeze time for deterministic created_at
    monkeypatch.setattr("app.aws.records.time.time", lambda: 1000)

    item = records.put_photo_record(
        user_id="u1", memory_id="m1", filename="pic.jpg", processed=_processed()
    )
    photo_id = item["photo_id"]
    assert photo_id

    stored = records.get_photo_record(photo_id)
    assert stored["user_id"] == "u1"
    assert stored["memory_id"] == "m1"
    assert stored["created_at"] == 1000
    assert stored["content_type"] == "image/webp"
    assert stored["path"] == "/tmp/x.webp"
    assert stored["size"] == 123
    assert isinstance(stored["size"], int)
    assert stored["metadata"]["width"] == 30
    assert stored["metadata"]["original_format"] == "jpeg"

    deleted = records.delete_photo_record(photo_id)
    assert deleted["photo_id"] == photo_id
    assert dynamodb_table_factory().get_item(Key={"photo_id": photo_id}).get("Item") is None

    with pytest.raises(KeyError):
        records.get_photo_record(photo_id)
    with pytest.raises(KeyError):
        records.delete_photo_record(photo_id)


def test_put_photo_record_requires_ids(aws_mock):
    with pytest.raises(ValueError):
        records.put_photo_record(user_id="", memory_id="m1", filename="a.jpg", processed=_processed())


def test_list_photo_records_filters_success(aws_mock, monkeypatch):
    counter = {"t": 1000}
    def fake_time():
        v = counter["t"]
        counter["t"] += 500  # 1000, 1500, 2000
        return v
    monkeypatch.setattr("app.aws.records.time.time", fake_time)

    records.put_photo_record(user_id="u1", memory_id="m1", filename="a.jpg", processed=_processed())
    records.put_photo_record(user_id="u2", memory_id="m1", filename="b.jpg", processed=_processed())
    records.put_photo_record(user_id="u1", memory_id="m2", filename="c.jpg", processed=_processed())

    items = records.list_photo_records("m1")
    assert [i["filename"] for i in items] == ["a.jpg", "b.jpg"]

    items = records.list_photo_records("m1", user_id="u2")
    assert len(items) == 1
    assert items[0]["user_id"] == "u2"

    assert records.list_photo_records("unknown") == []
