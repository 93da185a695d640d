"""
Shared pytest fixtures: tmp upload dir, fresh store, fake external
services and a FastAPI TestClient wired to them.
"""
import json

import pytest
from fastapi.testclient import TestClient

from app.dependencies import get_pipeline, get_store
from app.main import app
from app.pipeline import IngestionPipeline
from app.pipeline.storage import UploadStorage
from app.schemas import ParsedReceipt, ReceiptRecord
from app.store import ReceiptStore

MAX_UPLOAD_SIZE = 10 * 1024 * 1024

RAW_TEXT = (
    "CHIPOTLE MEXICAN GRILL\n"
    "01/15/2024 12:31\n"
    "Burrito        9.99\n"
    "Drink          2.00\n"
    "Subtotal      11.99\n"
    "Tax            0.85\n"
    "Total         12.84\n"
    "VISA ****1234\n"
)

PARSED = {
    "merchant": "Chipotle",
    "date": "2024-01-15",
    "items": [
        {"name": "Burrito", "price": 9.99},
        {"name": "Drink", "price": 2.00},
    ],
    "subtotal": 11.99,
    "tax": 0.85,
    "total": 12.84,
    "category": "Food",
    "paymentMethod": "Credit Card",
}

JPEG_BYTES = b"\xff\xd8\xff\xe0fake-jpeg-body"


class FakeExtractor:
    def __init__(self, text=RAW_TEXT, error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def extract_text(self, data, media_type, filename):
        self.calls.append((data, media_type, filename))
        if self.error:
            raise self.error
        return self.text


class FakeStructurer:
    def __init__(self, response=None, error=None):
        self.response = json.dumps(PARSED) if response is None else response
        self.error = error
        self.calls = []

    async def structure(self, raw_text):
        self.calls.append(raw_text)
        if self.error:
            raise self.error
        return self.response


def make_record(receipt_id, total=10.0, date="2024-01-05", category="Food", merchant="Shop"):
    parsed = ParsedReceipt.model_validate(
        {**PARSED, "merchant": merchant, "date": date, "total": total, "category": category}
    )
    return ReceiptRecord(
        id=receipt_id,
        image_url=f"http://testserver/uploads/{receipt_id}.jpg",
        parsed_data=parsed,
        raw_text=RAW_TEXT,
        uploaded_at="2024-01-15T12:00:00+00:00",
    )


@pytest.fixture()
def storage(tmp_path):
    s = UploadStorage(tmp_path / "uploads")
    s.ensure_directory()
    return s


@pytest.fixture()
def store(storage):
    return ReceiptStore(storage)


@pytest.fixture()
def extractor():
    return FakeExtractor()


@pytest.fixture()
def structurer():
    return FakeStructurer()


@pytest.fixture()
def pipeline(store, storage, extractor, structurer):
    return IngestionPipeline(
        store=store,
        storage=storage,
        extractor=extractor,
        structurer=structurer,
        max_upload_size=MAX_UPLOAD_SIZE,
    )


@pytest.fixture()
def client(store, pipeline):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
