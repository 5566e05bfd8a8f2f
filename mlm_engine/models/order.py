"""
Order model.

Minimal shape of the storefront order needed by the commission engine:
a buyer reference, the amounts a commission may be based on, and the
lifecycle status.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mlm_engine.models.base import Base
from mlm_engine.models.types import MoneyType

if TYPE_CHECKING:
    from mlm_engine.models.user import User


class OrderStatus(StrEnum):
    """Order lifecycle statuses known to the storefront."""

    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    PAID = "paid"
    CANCELLED = "cancelled"
    UNVERIFIED = "unverified"


# Historical spellings still found in stored orders
ORDER_STATUS_ALIASES: dict[str, OrderStatus] = {
    "deliverd": OrderStatus.DELIVERED,
}


def parse_order_status(raw: str | None) -> OrderStatus | None:
    """
    Normalize a raw order status string.

    Args:
        raw: Status as stored or submitted (any case, may be misspelled)

    Returns:
        OrderStatus or None if the value is empty or unknown
    """
    if raw is None:
        return None

    value = str(raw).strip().lower()
    if not value:
        return None

    if value in ORDER_STATUS_ALIASES:
        return ORDER_STATUS_ALIASES[value]

    try:
        return OrderStatus(value)
    except ValueError:
        return None


class Order(Base):
    """Order placed in the storefront."""

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Human facing order number (e.g. "ORD-2026-0001")
    order_number: Mapped[str | None] = mapped_column(
        String(64), nullable=True, unique=True, index=True
    )

    # Buyer
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Amounts
    subtotal: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )
    total_amount: Mapped[Decimal | None] = mapped_column(
        MoneyType, nullable=True
    )

    status: Mapped[str] = mapped_column(
        String(32), default=OrderStatus.PENDING.value, nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    user: Mapped[Optional["User"]] = relationship(
        "User", back_populates="orders", lazy="raise"
    )

    @property
    def eligible_amount(self) -> Decimal:
        """Amount commissions are based on: subtotal, then total, then 0."""
        if self.subtotal is not None:
            return self.subtotal
        if self.total_amount is not None:
            return self.total_amount
        return Decimal("0")

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Order(id={self.id}, order_number={self.order_number!r}, "
            f"user_id={self.user_id}, status={self.status!r})>"
        )
