"""
Referral commission types.

Plain value objects passed between repositories, services and callers.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any


class SkipReason(StrEnum):
    """Why the engine created no commissions for an order."""

    DISABLED = "disabled"
    BELOW_MIN = "below-min"
    ALREADY_CREATED = "already-created"
    NO_BUYER = "no-buyer"
    NO_REFERRER = "no-referrer"
    SELF_REF = "self-ref"
    NO_LEVELS = "no-levels"


@dataclass(frozen=True)
class LevelRate:
    """Percent paid at one upline level (level 1 = direct referrer)."""

    level: int
    percent: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"level": self.level, "percent": str(self.percent)}


@dataclass(frozen=True)
class CommissionSettings:
    """Snapshot of the commission program settings."""

    is_enabled: bool
    levels: tuple[LevelRate, ...]
    min_order_amount: Decimal
    prevent_self_referral: bool
    one_commission_per_order: bool

    @property
    def max_levels(self) -> int:
        return len(self.levels)

    def to_dict(self) -> dict[str, Any]:
        return {
            "isEnabled": self.is_enabled,
            "levels": [lv.to_dict() for lv in self.levels],
            "minOrderAmount": str(self.min_order_amount),
            "preventSelfReferral": self.prevent_self_referral,
            "oneCommissionPerOrder": self.one_commission_per_order,
        }


@dataclass
class CommissionResult:
    """Result of commission generation for one order."""

    created_count: int = 0
    skip_reason: SkipReason | None = None
    created_ids: list[int] = field(default_factory=list)

    @property
    def skipped(self) -> bool:
        return self.skip_reason is not None


@dataclass
class CommissionTotals:
    """Commission amounts per status; every status is always present."""

    pending_amount: Decimal = Decimal("0")
    approved_amount: Decimal = Decimal("0")
    paid_amount: Decimal = Decimal("0")
    void_amount: Decimal = Decimal("0")

    def to_dict(self) -> dict[str, str]:
        return {
            "pendingAmount": str(self.pending_amount),
            "approvedAmount": str(self.approved_amount),
            "paidAmount": str(self.paid_amount),
            "voidAmount": str(self.void_amount),
        }


@dataclass
class CommissionCounts:
    """Number of commissions per status; every status is always present."""

    pending_count: int = 0
    approved_count: int = 0
    paid_count: int = 0
    void_count: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "pendingCount": self.pending_count,
            "approvedCount": self.approved_count,
            "paidCount": self.paid_count,
            "voidCount": self.void_count,
        }


@dataclass(frozen=True)
class UserBrief:
    """Display fields of a user attached to a commission row."""

    id: int
    name: str | None
    email: str | None
    referral_code: str | None


@dataclass(frozen=True)
class OrderBrief:
    """Display fields of an order attached to a commission row."""

    id: int
    order_number: str | None
    subtotal: Decimal | None
    total_amount: Decimal | None
    status: str


@dataclass(frozen=True)
class CommissionView:
    """Commission ledger row joined with order, buyer and earner."""

    id: int
    level: int
    base_amount: Decimal
    percent: Decimal
    amount: Decimal
    status: str
    note: str | None
    created_at: datetime
    order: OrderBrief | None
    buyer: UserBrief | None
    earner: UserBrief | None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key in ("base_amount", "percent", "amount"):
            data[key] = str(data[key])
        if data["order"]:
            for key in ("subtotal", "total_amount"):
                value = data["order"][key]
                data["order"][key] = None if value is None else str(value)
        data["created_at"] = self.created_at.isoformat()
        return data


@dataclass
class EarnerSummary:
    """A user's own commission overview."""

    totals: CommissionTotals
    counts: CommissionCounts
    recent: list[CommissionView]


@dataclass
class TreeNode:
    """One user in the referral tree report."""

    id: int
    name: str | None
    email: str | None
    referral_code: str | None
    avatar: str | None
    mlm_active: bool
    referred_at: datetime | None
    children_count: int = 0
    totals: CommissionTotals | None = None
    children: list["TreeNode"] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "referralCode": self.referral_code,
            "avatar": self.avatar,
            "mlmActive": self.mlm_active,
            "referredAt": (
                self.referred_at.isoformat() if self.referred_at else None
            ),
            "childrenCount": self.children_count,
            "children": [child.to_dict() for child in self.children],
        }
        if self.totals is not None:
            data["totals"] = self.totals.to_dict()
        return data


@dataclass
class ReferralTree:
    """Referral tree report with the bounds actually applied."""

    root: TreeNode
    depth: int
    per: int
    include_totals: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "tree": self.root.to_dict(),
            "meta": {
                "depth": self.depth,
                "per": self.per,
                "includeTotals": self.include_totals,
            },
        }
