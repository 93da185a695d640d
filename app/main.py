"""
Receipt Scanner backend: FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import settings
from app.dependencies import get_store
from app.errors import (
    ReceiptError,
    generic_exception_handler,
    http_exception_handler,
    receipt_error_handler,
    validation_exception_handler,
)
from app.pipeline import IngestionPipeline
from app.pipeline.extractor import OpenAITextExtractor
from app.pipeline.storage import UploadStorage
from app.pipeline.structurer import OpenAIReceiptStructurer
from app.schemas import HealthResponse
from app.store import ReceiptStore

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s  %(name)-30s  %(levelname)-5s  %(message)s",
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: upload dir + process-wide store and pipeline
    storage = UploadStorage(settings.UPLOAD_DIR, settings.UPLOAD_URL_PATH)
    storage.ensure_directory()
    store = ReceiptStore(storage)
    app.state.storage = storage
    app.state.store = store
    app.state.pipeline = IngestionPipeline(
        store=store,
        storage=storage,
        extractor=OpenAITextExtractor(),
        structurer=OpenAIReceiptStructurer(),
        max_upload_size=settings.MAX_UPLOAD_SIZE,
    )
    if not settings.OPENAI_API_KEY:
        logger.warning("OPENAI_API_KEY is not set; uploads will fail")
    logger.info("Upload storage ready at %s (served on %s)", storage.directory, storage.url_path)
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Receipt Scanner",
    description="Receipt upload → text extraction → structured expense → dashboard stats",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(ReceiptError, receipt_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.mount(
    settings.UPLOAD_URL_PATH,
    StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
    name="uploads",
)


@app.get("/")
async def root():
    return {"service": "Receipt Scanner", "version": VERSION, "status": "running"}


@app.get("/api/health", response_model=HealthResponse)
def health_check(store=Depends(get_store)):
    return HealthResponse(
        timestamp=datetime.now(timezone.utc).isoformat(),
        receipts_count=len(store),
    )


# ── Register API router ──────────────────────────────────────────────────
from app.routers.receipts import router as receipts_router  # noqa: E402

app.include_router(receipts_router, prefix="/api", tags=["Receipts"])
