from app.schemas.base import (  # noqa: F401
    CamelModel,
    Category,
    CategorySpending,
    DashboardStats,
    DeleteResponse,
    HealthResponse,
    MonthlySpending,
    ParsedReceipt,
    ReceiptItem,
    ReceiptRecord,
    UploadResponse,
)
