"""
Services.

Business logic layer.
"""

from mlm_engine.services.base_service import (
    BaseService,
    log_operation,
    transaction,
)
from mlm_engine.services.mlm import (
    CommissionEngine,
    CommissionManager,
    CommissionReportService,
    CommissionSettingsService,
    OrderLifecycleHook,
    ReferralChainManager,
    ReferralTreeReporter,
)
from mlm_engine.services.user import UserService

__all__ = [
    "BaseService",
    "transaction",
    "log_operation",
    "CommissionEngine",
    "CommissionManager",
    "CommissionReportService",
    "CommissionSettingsService",
    "OrderLifecycleHook",
    "ReferralChainManager",
    "ReferralTreeReporter",
    "UserService",
]
