"""
Data models for the Waypoint inventory example.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

from waypoint.persistence import TableMapping


class Base(DeclarativeBase):
    pass


class Warehouse(Base):
    __tablename__ = "warehouse"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    products: Mapped[list["Product"]] = relationship(back_populates="warehouse")

    def __repr__(self) -> str:
        return f"Warehouse(id={self.id!r}, name={self.name!r})"


class Product(Base):
    __tablename__ = "product"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    sku: Mapped[str] = mapped_column(String(40), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=0)
    warehouse_id: Mapped[Optional[int]] = mapped_column(ForeignKey("warehouse.id"))
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    warehouse: Mapped[Optional[Warehouse]] = relationship(back_populates="products")

    def __repr__(self) -> str:
        return f"Product(sku={self.sku!r}, quantity={self.quantity!r})"


class Supplier:
    """Plain class mapped imperatively through a :class:`TableMapping`."""

    def __init__(self, name: str, contact_email: str | None = None) -> None:
        self.name = name
        self.contact_email = contact_email

    def __repr__(self) -> str:
        return f"Supplier(name={self.name!r})"


SUPPLIER_MAPPING = TableMapping(
    entity=Supplier,
    table_name="supplier",
    columns=[
        Column("id", Integer, primary_key=True),
        Column("name", String(120), nullable=False),
        Column("contact_email", String(200)),
    ],
)


@dataclass
class StockLine:
    """Row shape for raw stock reports."""

    sku: str
    quantity: int
    warehouse: Optional[str] = None
