"""
MLM settings model.

Singleton configuration row for the referral commission program.
"""

from datetime import UTC, datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, Integer
from sqlalchemy.orm import Mapped, mapped_column

from mlm_engine.models.base import Base
from mlm_engine.models.types import MoneyType

# The one and only settings row
MLM_SETTINGS_ID = 1


class MLMSettings(Base):
    """
    Referral commission program settings.

    Attributes:
        id: Always MLM_SETTINGS_ID
        is_enabled: Master switch for commission generation
        levels: JSON array of {"level": int, "percent": "<decimal string>"},
            index 0 is level 1 (direct referrer)
        min_order_amount: Eligible base must be at least this value
        prevent_self_referral: Skip buyers whose referrer is themselves
        one_commission_per_order: Skip orders that already have ledger rows
    """

    __tablename__ = "mlm_settings"
    __table_args__ = (
        CheckConstraint(
            f"id = {MLM_SETTINGS_ID}", name="check_mlm_settings_singleton"
        ),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, default=MLM_SETTINGS_ID
    )

    is_enabled: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    levels: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, default=list, nullable=False
    )
    min_order_amount: Mapped[Decimal] = mapped_column(
        MoneyType, default=Decimal("0"), nullable=False
    )
    prevent_self_referral: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )
    one_commission_per_order: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
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

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<MLMSettings(is_enabled={self.is_enabled}, "
            f"levels={self.levels}, "
            f"min_order_amount={self.min_order_amount})>"
        )
