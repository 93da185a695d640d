"""
Receipt API endpoints.

POST   /api/receipts/upload  — upload file → extract → structure → store
GET    /api/receipts         — list receipts (newest first, optional filters)
GET    /api/receipts/stats   — dashboard statistics
GET    /api/receipts/{id}    — get one receipt
DELETE /api/receipts/{id}    — delete receipt and its stored file
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile as StarletteUploadFile

from app.aggregation import compute_stats
from app.config import settings
from app.dependencies import get_pipeline, get_store
from app.errors import ReceiptNotFound, error_body
from app.pipeline import IngestionPipeline
from app.pipeline.validation import UploadedFile
from app.query import SortField, SortOrder, filter_receipts, sort_receipts
from app.schemas import (
    Category,
    DashboardStats,
    DeleteResponse,
    ReceiptRecord,
    UploadResponse,
)
from app.store import ReceiptStore

logger = logging.getLogger(__name__)
router = APIRouter()


def _public_base_url(request: Request) -> str:
    return settings.PUBLIC_BASE_URL or str(request.base_url)


# ── POST /api/receipts/upload ────────────────────────────────────────────
@router.post("/receipts/upload", response_model=UploadResponse)
async def upload_receipt(
    request: Request,
    pipeline: IngestionPipeline = Depends(get_pipeline),
):
    # multipart field "receipt"; anything that is not a file counts as missing
    form = await request.form()
    receipt = form.get("receipt")

    upload = None
    if isinstance(receipt, StarletteUploadFile):
        # one byte past the ceiling is enough to detect oversize input
        data = await receipt.read(pipeline.max_upload_size + 1)
        upload = UploadedFile(
            filename=receipt.filename or "",
            content_type=receipt.content_type or "",
            data=data,
        )
        logger.info("Upload: filename=%s  type=%s", upload.filename, upload.content_type)

    record = await pipeline.ingest(upload, _public_base_url(request))
    return UploadResponse(success=True, data=record)


# ── GET /api/receipts ────────────────────────────────────────────────────
@router.get("/receipts", response_model=List[ReceiptRecord])
def list_receipts(
    search: Optional[str] = None,
    category: Optional[Category] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    min_amount: Optional[float] = None,
    max_amount: Optional[float] = None,
    sort_by: Optional[SortField] = None,
    order: SortOrder = "desc",
    store: ReceiptStore = Depends(get_store),
):
    records = store.list_all()
    records = filter_receipts(
        records,
        search=search,
        category=category,
        start_date=start_date,
        end_date=end_date,
        min_amount=min_amount,
        max_amount=max_amount,
    )
    if sort_by:
        records = sort_receipts(records, sort_by, order)
    logger.info("Listing %d receipts", len(records))
    return records


# ── GET /api/receipts/stats ──────────────────────────────────────────────
@router.get("/receipts/stats", response_model=DashboardStats)
def get_stats(store: ReceiptStore = Depends(get_store)):
    try:
        return compute_stats(store.list_all())
    except Exception:
        logger.exception("Error calculating stats")
        return JSONResponse(
            status_code=500, content=error_body("Failed to calculate statistics")
        )


# ── GET /api/receipts/{receipt_id} ───────────────────────────────────────
@router.get("/receipts/{receipt_id}", response_model=ReceiptRecord)
def get_receipt(receipt_id: str, store: ReceiptStore = Depends(get_store)):
    record = store.get(receipt_id)
    if record is None:
        logger.warning("Receipt not found: %s", receipt_id)
        raise ReceiptNotFound(receipt_id)
    return record


# ── DELETE /api/receipts/{receipt_id} ────────────────────────────────────
@router.delete("/receipts/{receipt_id}", response_model=DeleteResponse)
def delete_receipt(receipt_id: str, store: ReceiptStore = Depends(get_store)):
    if not store.delete_by_id(receipt_id):
        logger.warning("Delete of unknown receipt: %s", receipt_id)
        raise ReceiptNotFound(receipt_id)
    return DeleteResponse()
