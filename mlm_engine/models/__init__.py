"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from mlm_engine.models.base import Base
from mlm_engine.models.mlm_commission import (
    CommissionStatus,
    MLMCommission,
    parse_commission_status,
)
from mlm_engine.models.mlm_settings import MLM_SETTINGS_ID, MLMSettings
from mlm_engine.models.order import (
    ORDER_STATUS_ALIASES,
    Order,
    OrderStatus,
    parse_order_status,
)
from mlm_engine.models.user import User

__all__ = [
    # Base
    "Base",
    # Core Models
    "User",
    "Order",
    "OrderStatus",
    "ORDER_STATUS_ALIASES",
    "parse_order_status",
    # MLM Models
    "MLMSettings",
    "MLM_SETTINGS_ID",
    "MLMCommission",
    "CommissionStatus",
    "parse_commission_status",
]
