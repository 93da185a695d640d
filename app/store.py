"""
In-memory receipt store.

Records are kept newest first for the lifetime of the process. All
mutations go through one lock; reads return a snapshot list.
"""
from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Optional

from app.pipeline.storage import UploadStorage
from app.schemas import ReceiptRecord

logger = logging.getLogger(__name__)


class ReceiptStore:
    def __init__(self, storage: Optional[UploadStorage] = None):
        self._records: deque[ReceiptRecord] = deque()
        self._issued_ids: set[str] = set()
        self._lock = threading.Lock()
        self._storage = storage

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def insert_front(self, record: ReceiptRecord) -> None:
        with self._lock:
            # ids are never reused, even after deletion
            if record.id in self._issued_ids:
                raise ValueError(f"Duplicate receipt id: {record.id}")
            self._issued_ids.add(record.id)
            self._records.appendleft(record)
        logger.info("Stored receipt %s", record.id)

    def list_all(self) -> list[ReceiptRecord]:
        with self._lock:
            return list(self._records)

    def get(self, receipt_id: str) -> Optional[ReceiptRecord]:
        with self._lock:
            for record in self._records:
                if record.id == receipt_id:
                    return record
        return None

    def delete_by_id(self, receipt_id: str) -> bool:
        """Remove the record and, best-effort, its stored file."""
        removed: Optional[ReceiptRecord] = None
        with self._lock:
            for idx, record in enumerate(self._records):
                if record.id == receipt_id:
                    removed = record
                    del self._records[idx]
                    break

        if removed is None:
            return False

        logger.info("Deleted receipt %s", receipt_id)
        if self._storage is not None:
            self._storage.discard_url(removed.image_url)
        return True
