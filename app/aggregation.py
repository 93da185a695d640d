"""
Dashboard statistics, recomputed from scratch on every call.
"""
from __future__ import annotations

from typing import Iterable

from app.schemas import (
    CategorySpending,
    DashboardStats,
    MonthlySpending,
    ReceiptRecord,
)


def compute_stats(records: Iterable[ReceiptRecord]) -> DashboardStats:
    total_spent = 0.0
    total_receipts = 0
    by_month: dict[str, float] = {}
    by_category: dict = {}

    for record in records:
        parsed = record.parsed_data
        total_spent += parsed.total
        total_receipts += 1

        month = parsed.date[:7]  # YYYY-MM
        by_month[month] = by_month.get(month, 0) + parsed.total
        by_category[parsed.category] = by_category.get(parsed.category, 0) + parsed.total

    monthly = [
        MonthlySpending(month=month, amount=amount)
        for month, amount in sorted(by_month.items())
    ]
    # sorted() is stable, so equal amounts keep encounter order
    categories = sorted(
        (CategorySpending(category=c, amount=a) for c, a in by_category.items()),
        key=lambda c: c.amount,
        reverse=True,
    )
    return DashboardStats(
        total_spent=total_spent,
        total_receipts=total_receipts,
        monthly_spending=monthly,
        category_breakdown=categories,
    )
