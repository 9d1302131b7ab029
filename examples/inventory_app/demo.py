"""
Inventory example showcasing the data context, interceptors and raw SQL.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, List

from sqlalchemy import Integer, String, inspect

from waypoint.config import ConnectionConfig
from waypoint.hooks import (
    EventManager,
    Interceptor,
    InterceptorResult,
    PreSaveEventArgs,
    register_event_manager,
)
from waypoint.persistence import DataContext, SqlParameter

from .models import SUPPLIER_MAPPING, Base, Product, StockLine, Supplier, Warehouse


class AuditInterceptor(Interceptor):
    """
    Stamps ``created_at``/``updated_at`` on pending and modified entities before commit.
    """

    event = PreSaveEventArgs
    priority = 10

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self.clock = clock

    def apply(self, context: DataContext, args: PreSaveEventArgs) -> InterceptorResult:
        now = self.clock()
        for instance in context.session.new:
            if hasattr(instance, "created_at") and instance.created_at is None:
                instance.created_at = now
            if hasattr(instance, "updated_at"):
                instance.updated_at = now
        for instance in context.session.dirty:
            if hasattr(instance, "updated_at"):
                instance.updated_at = now
        return InterceptorResult.succeed()


def bootstrap_context(dsn: str = "sqlite:///:memory:") -> DataContext:
    context = DataContext.from_config(ConnectionConfig.from_dsn(dsn), mappings=[SUPPLIER_MAPPING])
    _ensure_schema(context)
    manager = EventManager()
    manager.add_interceptor(AuditInterceptor())
    register_event_manager(context, manager)
    return context


def _ensure_schema(context: DataContext) -> None:
    bind = context.session.get_bind()
    Base.metadata.create_all(bind)
    inspect(Supplier).local_table.create(bind, checkfirst=True)


def seed_sample_data(context: DataContext) -> Dict[str, List[Any]]:
    north = context.add(Warehouse(name="North"))
    south = context.add(Warehouse(name="South"))
    products = [
        Product(sku="BOLT-10", name="Hex bolt M10", quantity=250, warehouse=north),
        Product(sku="NUT-10", name="Hex nut M10", quantity=4, warehouse=north),
        Product(sku="WASHER-10", name="Washer M10", quantity=2, warehouse=south),
    ]
    for product in products:
        context.add(product)
    context.add(Supplier(name="Fastenal", contact_email="orders@example.com"))
    context.commit()
    return {
        "warehouses": [north.name, south.name],
        "products": [product.sku for product in products],
    }


def low_stock_report(context: DataContext, threshold: int = 10) -> List[StockLine]:
    rows = context.execute_sql_query(
        StockLine,
        "SELECT p.sku AS sku, p.quantity AS quantity, w.name AS warehouse "
        "FROM product p LEFT JOIN warehouse w ON w.id = p.warehouse_id "
        "WHERE p.quantity < :threshold ORDER BY p.sku",
        SqlParameter("threshold", threshold, Integer()),
    )
    return list(rows)


def restock(context: DataContext, sku: str, amount: int) -> int:
    updated = context.execute_sql_command(
        "UPDATE product SET quantity = quantity + :amount WHERE sku = :sku",
        SqlParameter("amount", amount, Integer()),
        SqlParameter("sku", sku, String()),
    )
    context.commit()
    return updated


def count_products(context: DataContext) -> int:
    return context.execute_function("SELECT COUNT(*) FROM product")


def run_demo(dsn: str = "sqlite:///:memory:") -> List[StockLine]:
    with bootstrap_context(dsn) as context:
        seed_sample_data(context)
        restock(context, "NUT-10", 20)
        return low_stock_report(context)


if __name__ == "__main__":
    for line in run_demo("sqlite:///inventory_demo.db"):
        print(f"{line.sku}: {line.quantity} left in {line.warehouse}")
