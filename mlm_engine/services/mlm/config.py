"""
Referral commission program configuration.

Contains the defaults used whenever no settings row has been saved yet
(never persisted automatically) and the status sets the engine and the
order hook compare against.
"""

from decimal import Decimal

from mlm_engine.models.mlm_commission import CommissionStatus
from mlm_engine.models.order import OrderStatus
from mlm_engine.services.mlm.types import CommissionSettings, LevelRate

# 3-level program: 5% / 3% / 2%
DEFAULT_LEVELS = (
    LevelRate(level=1, percent=Decimal("5")),
    LevelRate(level=2, percent=Decimal("3")),
    LevelRate(level=3, percent=Decimal("2")),
)

DEFAULT_COMMISSION_SETTINGS = CommissionSettings(
    is_enabled=True,
    levels=DEFAULT_LEVELS,
    min_order_amount=Decimal("0"),
    prevent_self_referral=True,
    one_commission_per_order=True,
)

# Order statuses that finalize an order and trigger commissions
FINALIZED_ORDER_STATUSES = frozenset({
    OrderStatus.DELIVERED,
    OrderStatus.COMPLETED,
    OrderStatus.PAID,
})

COMMISSION_STATUSES = tuple(CommissionStatus)
