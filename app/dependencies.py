"""
Request-scoped access to the singletons built in the app lifespan.
"""
from fastapi import Request

from app.pipeline import IngestionPipeline
from app.store import ReceiptStore


def get_store(request: Request) -> ReceiptStore:
    return request.app.state.store


def get_pipeline(request: Request) -> IngestionPipeline:
    return request.app.state.pipeline
