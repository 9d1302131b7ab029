from .demo import (  # noqa: F401
    AuditInterceptor,
    bootstrap_context,
    count_products,
    low_stock_report,
    restock,
    run_demo,
    seed_sample_data,
)

__all__ = [
    "AuditInterceptor",
    "bootstrap_context",
    "seed_sample_data",
    "low_stock_report",
    "restock",
    "count_products",
    "run_demo",
]
