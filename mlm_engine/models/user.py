"""
User model.

Only the fields the referral graph needs are modelled here; profile,
authentication and KYC data belong to other parts of the storefront.
"""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mlm_engine.models.base import Base

if TYPE_CHECKING:
    from mlm_engine.models.mlm_commission import MLMCommission
    from mlm_engine.models.order import Order


class User(Base):
    """User model - storefront customers taking part in the referral program."""

    __tablename__ = "users"

    # Primary key
    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    # Profile (display fields for reports)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(
        String(255), nullable=True, unique=True, index=True
    )
    avatar_url: Mapped[str | None] = mapped_column(
        String(1024), nullable=True
    )

    # Referral
    referral_code: Mapped[str | None] = mapped_column(
        String(20), nullable=True, unique=True, index=True
    )
    referred_by_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    referred_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    mlm_active: Mapped[bool] = mapped_column(
        Boolean, default=True, nullable=False
    )

    # Timestamps
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
    referred_by: Mapped[Optional["User"]] = relationship(
        "User",
        remote_side=[id],
        foreign_keys=[referred_by_id],
        lazy="raise",
    )
    orders: Mapped[list["Order"]] = relationship(
        "Order", back_populates="user", lazy="raise"
    )
    commissions: Mapped[list["MLMCommission"]] = relationship(
        "MLMCommission",
        foreign_keys="MLMCommission.earner_id",
        back_populates="earner",
        lazy="raise",
    )

    @property
    def is_referred(self) -> bool:
        """Check if user was attributed to a referrer."""
        return self.referred_by_id is not None

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<User(id={self.id}, email={self.email!r}, "
            f"referral_code={self.referral_code!r}, "
            f"referred_by_id={self.referred_by_id})>"
        )
