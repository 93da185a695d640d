"""
Canonical JSON schemas for receipt ingestion and the dashboard.

All models serialize to camelCase on the wire (``imageUrl``,
``parsedData`` ...) while keeping snake_case attributes in Python.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Parsed receipt (structuring service output)
# ---------------------------------------------------------------------------

class Category(str, Enum):
    FOOD = "Food"
    TRAVEL = "Travel"
    GROCERY = "Grocery"
    ENTERTAINMENT = "Entertainment"
    TRANSPORTATION = "Transportation"
    SHOPPING = "Shopping"
    HEALTHCARE = "Healthcare"
    UTILITIES = "Utilities"
    OTHER = "Other"


class ReceiptItem(CamelModel):
    """A single purchased line item."""
    model_config = ConfigDict(frozen=True)

    name: str
    price: float


class ParsedReceipt(CamelModel):
    """Structured receipt as returned by the structuring service.

    Arithmetic consistency (``subtotal + tax == total``) and the date
    format are not checked.
    """
    model_config = ConfigDict(frozen=True)

    merchant: str
    date: str = Field(..., description="YYYY-MM-DD")
    items: tuple[ReceiptItem, ...]
    subtotal: float
    tax: float
    total: float
    category: Category
    payment_method: Optional[str] = None


# ---------------------------------------------------------------------------
# Stored record
# ---------------------------------------------------------------------------

class ReceiptRecord(CamelModel):
    model_config = ConfigDict(frozen=True)

    id: str
    image_url: str
    parsed_data: ParsedReceipt
    raw_text: str
    uploaded_at: str


# ---------------------------------------------------------------------------
# Dashboard statistics
# ---------------------------------------------------------------------------

class MonthlySpending(CamelModel):
    month: str = Field(..., description="YYYY-MM")
    amount: float


class CategorySpending(CamelModel):
    category: Category
    amount: float


class DashboardStats(CamelModel):
    total_spent: float = 0
    total_receipts: int = 0
    monthly_spending: list[MonthlySpending] = Field(default_factory=list)
    category_breakdown: list[CategorySpending] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# API response envelopes
# ---------------------------------------------------------------------------

class UploadResponse(CamelModel):
    success: bool = True
    data: ReceiptRecord


class DeleteResponse(CamelModel):
    success: bool = True
    message: str = "Receipt deleted successfully"


class HealthResponse(CamelModel):
    status: str = "OK"
    timestamp: str
    receipts_count: int
