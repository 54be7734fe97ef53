# models.py

"""Database models for orders and their line items.

``Order`` owns its ``OrderItem`` rows: items are persisted and deleted
together with the order. ``OrderItem.order_id`` is only a back-reference
used for querying.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    TypeDecorator,
)
from sqlalchemy.orm import declarative_base, relationship

from .domain import OrderStatus

Base = declarative_base()

CENT = Decimal("0.01")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime that comes back as UTC on every backend.

    SQLite drops the offset on storage, so naive values read back are
    tagged as UTC.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):  # type: ignore[no-untyped-def]
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value, dialect):  # type: ignore[no-untyped-def]
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


class Order(Base):
    """A customer's purchase with its items, status and total."""

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False, index=True)
    status = Column(
        Enum(OrderStatus), nullable=False, default=OrderStatus.PENDING, index=True
    )
    total_amount = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(
        UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow
    )
    version = Column(Integer, nullable=False)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
        lazy="selectin",
    )

    # Stale UPDATEs match zero rows and raise StaleDataError.
    __mapper_args__ = {"version_id_col": version}

    def add_item(self, item: "OrderItem") -> None:
        """Append ``item`` to this order.

        ``back_populates`` sets ``item.order`` as part of the append.
        """

        self.items.append(item)

    def calculate_total_amount(self) -> Decimal:
        """Recompute ``total_amount`` from the current items."""

        total = sum((item.subtotal for item in self.items), Decimal("0"))
        self.total_amount = total.quantize(CENT, rounding=ROUND_HALF_UP)
        return self.total_amount

    def can_be_cancelled(self) -> bool:
        return self.status == OrderStatus.PENDING


class OrderItem(Base):
    """One product line within an order."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(
        Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False
    )
    product_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="items")

    @property
    def subtotal(self) -> Decimal:
        """Return ``quantity * price``; never stored."""

        return Decimal(self.quantity) * Decimal(str(self.price))
