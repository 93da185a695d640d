"""
Filtering and sorting for the receipt list endpoint.
"""
from __future__ import annotations

from typing import Iterable, Literal, Optional

from app.schemas import Category, ReceiptRecord

SortField = Literal["date", "amount", "merchant"]
SortOrder = Literal["asc", "desc"]


def filter_receipts(
    records: Iterable[ReceiptRecord],
    search: Optional[str] = None,
    category: Optional[Category] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    min_amount: Optional[float] = None,
    max_amount: Optional[float] = None,
) -> list[ReceiptRecord]:
    """Keep records matching every given criterion. Bounds are inclusive."""
    needle = search.strip().lower() if search else ""
    result: list[ReceiptRecord] = []

    for record in records:
        parsed = record.parsed_data
        if needle and not (
            needle in parsed.merchant.lower() or needle in parsed.category.value.lower()
        ):
            continue
        if category is not None and parsed.category != category:
            continue
        day = parsed.date[:10]
        if start_date and day < start_date:
            continue
        if end_date and day > end_date:
            continue
        if min_amount is not None and parsed.total < min_amount:
            continue
        if max_amount is not None and parsed.total > max_amount:
            continue
        result.append(record)
    return result


_SORT_KEYS = {
    "date": lambda r: r.parsed_data.date,
    "amount": lambda r: r.parsed_data.total,
    "merchant": lambda r: r.parsed_data.merchant.lower(),
}


def sort_receipts(
    records: Iterable[ReceiptRecord],
    sort_by: SortField = "date",
    order: SortOrder = "desc",
) -> list[ReceiptRecord]:
    return sorted(records, key=_SORT_KEYS[sort_by], reverse=(order == "desc"))
