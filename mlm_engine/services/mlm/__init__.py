"""
Referral commission (MLM) services package.

Contains modular services for referral commissions:
- config: Defaults and status sets (DEFAULT_COMMISSION_SETTINGS, FINALIZED_ORDER_STATUSES)
- settings_service: Loads and saves program settings
- chain_manager: Walks the upline of a user
- commission_engine: Creates commissions for finalized orders
- commission_manager: Administrative status updates
- statistics: Totals, counts and listings
- tree_reporter: Bounded referral tree reports
- order_hooks: Order status change bridge
"""

from mlm_engine.services.mlm.chain_manager import ReferralChainManager
from mlm_engine.services.mlm.commission_engine import CommissionEngine
from mlm_engine.services.mlm.commission_manager import CommissionManager
from mlm_engine.services.mlm.config import (
    DEFAULT_COMMISSION_SETTINGS,
    DEFAULT_LEVELS,
    FINALIZED_ORDER_STATUSES,
)
from mlm_engine.services.mlm.order_hooks import (
    OrderLifecycleHook,
    is_finalization,
)
from mlm_engine.services.mlm.settings_service import (
    CommissionSettingsService,
    normalize_levels,
)
from mlm_engine.services.mlm.statistics import CommissionReportService
from mlm_engine.services.mlm.tree_reporter import ReferralTreeReporter
from mlm_engine.services.mlm.types import (
    CommissionCounts,
    CommissionResult,
    CommissionSettings,
    CommissionTotals,
    CommissionView,
    EarnerSummary,
    LevelRate,
    ReferralTree,
    SkipReason,
    TreeNode,
)


__all__ = [
    # Configuration
    "DEFAULT_COMMISSION_SETTINGS",
    "DEFAULT_LEVELS",
    "FINALIZED_ORDER_STATUSES",
    # Services
    "CommissionSettingsService",
    "normalize_levels",
    "ReferralChainManager",
    "CommissionEngine",
    "CommissionManager",
    "CommissionReportService",
    "ReferralTreeReporter",
    "OrderLifecycleHook",
    "is_finalization",
    # Types
    "CommissionCounts",
    "CommissionResult",
    "CommissionSettings",
    "CommissionTotals",
    "CommissionView",
    "EarnerSummary",
    "LevelRate",
    "ReferralTree",
    "SkipReason",
    "TreeNode",
]
