"""
Error taxonomy and the exception handlers that turn it into
``{"success": false, "error": ...}`` responses.
"""
from __future__ import annotations

import logging
from enum import Enum

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    NO_FILE = "NoFile"
    UNSUPPORTED_TYPE = "UnsupportedType"
    TOO_LARGE = "TooLarge"
    EXTRACTION_FAILED = "ExtractionFailed"
    PARSE_FAILED = "ParseFailed"
    NOT_FOUND = "NotFound"


STATUS_CODES: dict[ErrorKind, int] = {
    ErrorKind.NO_FILE: 400,
    ErrorKind.UNSUPPORTED_TYPE: 400,
    ErrorKind.TOO_LARGE: 413,
    ErrorKind.EXTRACTION_FAILED: 500,
    ErrorKind.PARSE_FAILED: 500,
    ErrorKind.NOT_FOUND: 404,
}


class ReceiptError(Exception):
    """Base class for errors surfaced to API clients."""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


class IngestError(ReceiptError):
    """Upload rejected or processing failed; no record was stored."""


class ReceiptNotFound(ReceiptError):
    def __init__(self, receipt_id: str):
        super().__init__(ErrorKind.NOT_FOUND, "Receipt not found")
        self.receipt_id = receipt_id


def error_body(message: str) -> dict:
    return {"success": False, "error": message}


def receipt_error_handler(request: Request, exc: ReceiptError):
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message))


def generic_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=error_body("Internal server error"))


def _describe_validation_error(error: dict) -> str:
    loc = ".".join(str(part) for part in error.get("loc", ()))
    return f"{loc}: {error.get('msg', 'invalid value')}" if loc else error.get("msg", "invalid value")


def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = "; ".join(_describe_validation_error(e) for e in exc.errors())
    return JSONResponse(status_code=422, content=error_body(f"Invalid request: {details}"))


def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )
