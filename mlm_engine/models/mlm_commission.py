"""
MLM commission model.

Ledger of referral commissions, one row per (order, earner).
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mlm_engine.models.base import Base
from mlm_engine.models.types import MoneyType, PercentType
from mlm_engine.utils.exceptions import InvalidCommissionStatusError

if TYPE_CHECKING:
    from mlm_engine.models.order import Order
    from mlm_engine.models.user import User


class CommissionStatus(StrEnum):
    """Commission ledger statuses."""

    PENDING = "pending"
    APPROVED = "approved"
    PAID = "paid"
    VOID = "void"


class MLMCommission(Base):
    """
    Commission earned by an upline user from a downline purchase.

    Rows are created once by the commission engine. Afterwards only
    ``status`` and ``note`` change, through administrative updates.
    Orders and users referenced by the ledger cannot be deleted.

    Attributes:
        id: Primary key
        order_id: Finalized order that produced the commission
        earner_id: Upline user receiving the commission
        buyer_id: User whose purchase triggered the commission
        level: Upline depth (1 = direct referrer)
        base_amount: Eligible amount the percent was applied to
        percent: Level percent in effect at creation time
        amount: round2(base_amount * percent / 100)
        status: pending / approved / paid / void
        note: Optional admin note
    """

    __tablename__ = "mlm_commissions"
    __table_args__ = (
        UniqueConstraint(
            "order_id", "earner_id", name="uq_mlm_commission_order_earner"
        ),
        CheckConstraint(
            "status IN ('pending', 'approved', 'paid', 'void')",
            name="check_mlm_commission_status",
        ),
        CheckConstraint("level >= 1", name="check_mlm_commission_level"),
        Index("ix_mlm_commissions_earner_status", "earner_id", "status"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    earner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    buyer_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
    )

    level: Mapped[int] = mapped_column(Integer, nullable=False)
    base_amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    percent: Mapped[Decimal] = mapped_column(PercentType, nullable=False)
    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    status: Mapped[str] = mapped_column(
        String(20),
        default=CommissionStatus.PENDING.value,
        nullable=False,
        index=True,
    )
    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    # Relationships
    order: Mapped["Order"] = relationship("Order", lazy="raise")
    earner: Mapped["User"] = relationship(
        "User",
        foreign_keys=[earner_id],
        back_populates="commissions",
        lazy="raise",
    )
    buyer: Mapped["User"] = relationship(
        "User", foreign_keys=[buyer_id], lazy="raise"
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<MLMCommission(id={self.id}, order_id={self.order_id}, "
            f"earner_id={self.earner_id}, level={self.level}, "
            f"amount={self.amount}, status={self.status!r})>"
        )


def parse_commission_status(value: object) -> CommissionStatus:
    """
    Validate a commission status value.

    Args:
        value: Submitted status (exact, lower-case)

    Returns:
        CommissionStatus

    Raises:
        InvalidCommissionStatusError: If value is not one of the four statuses
    """
    try:
        return CommissionStatus(value)
    except ValueError as exc:
        raise InvalidCommissionStatusError(value) from exc
