"""
Receipt ingestion pipeline.

Orchestrates: validate → store file → extract text → structure → insert.
"""
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional, Protocol

from starlette.concurrency import run_in_threadpool

from app.errors import ErrorKind, IngestError
from app.pipeline.storage import UploadStorage
from app.pipeline.structurer import ReceiptDecodeError, decode_parsed_receipt
from app.pipeline.validation import UploadedFile, validate_upload
from app.schemas import ParsedReceipt, ReceiptRecord

if TYPE_CHECKING:
    from app.store import ReceiptStore

logger = logging.getLogger(__name__)


class TextExtractor(Protocol):
    async def extract_text(self, data: bytes, media_type: str, filename: str) -> str: ...


class ReceiptStructurer(Protocol):
    async def structure(self, raw_text: str) -> Optional[str]: ...


class IngestionPipeline:
    def __init__(
        self,
        store: ReceiptStore,
        storage: UploadStorage,
        extractor: TextExtractor,
        structurer: ReceiptStructurer,
        max_upload_size: int,
    ) -> None:
        self.store = store
        self.storage = storage
        self.extractor = extractor
        self.structurer = structurer
        self.max_upload_size = max_upload_size

    async def ingest(self, upload: Optional[UploadedFile], base_url: str) -> ReceiptRecord:
        """Turn an uploaded file into a stored ``ReceiptRecord``.

        Raises ``IngestError``; nothing is inserted into the store unless
        both external calls succeed.
        """
        logger.info("Pipeline start — validate")
        upload = validate_upload(upload, self.max_upload_size)

        logger.info("Pipeline — store file %s (%d bytes)", upload.filename, len(upload.data))
        filename = await run_in_threadpool(self.storage.save, upload.data, upload.filename)

        try:
            raw_text = await self._extract(upload)
            parsed = await self._structure(raw_text)
            record = ReceiptRecord(
                id=str(uuid.uuid4()),
                image_url=self.storage.public_url(filename, base_url),
                parsed_data=parsed,
                raw_text=raw_text,
                uploaded_at=datetime.now(timezone.utc).isoformat(),
            )
            self.store.insert_front(record)
        except BaseException:
            # also runs on cancellation, so no await here
            self.storage.discard(filename)
            raise

        logger.info("Receipt ingested: %s  merchant=%s", record.id, parsed.merchant)
        return record

    async def _extract(self, upload: UploadedFile) -> str:
        logger.info("Pipeline — extract text")
        try:
            raw_text = await self.extractor.extract_text(
                upload.data, upload.media_type, upload.filename
            )
        except Exception as e:
            logger.exception("Text extraction failed for %s", upload.filename)
            raise IngestError(
                ErrorKind.EXTRACTION_FAILED, "Failed to extract text from image"
            ) from e
        logger.info("Extracted %d characters", len(raw_text))
        return raw_text

    async def _structure(self, raw_text: str) -> ParsedReceipt:
        logger.info("Pipeline — structure")
        try:
            content = await self.structurer.structure(raw_text)
            return decode_parsed_receipt(content)
        except ReceiptDecodeError as e:
            logger.error("Structuring output rejected: %s", e)
            raise IngestError(ErrorKind.PARSE_FAILED, "Failed to parse receipt data") from e
        except Exception as e:
            logger.exception("Structuring call failed")
            raise IngestError(ErrorKind.PARSE_FAILED, "Failed to parse receipt data") from e
