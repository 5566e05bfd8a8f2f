"""
Commission reporting module.

Read-only aggregates and listings over the commission ledger.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_engine.config.settings import settings
from mlm_engine.models.mlm_commission import (
    CommissionStatus,
    MLMCommission,
    parse_commission_status,
)
from mlm_engine.models.order import Order
from mlm_engine.models.user import User
from mlm_engine.repositories.mlm_commission_repository import (
    MLMCommissionRepository,
)
from mlm_engine.services.base_service import BaseService, log_operation
from mlm_engine.services.mlm.types import (
    CommissionCounts,
    CommissionTotals,
    CommissionView,
    EarnerSummary,
    OrderBrief,
    UserBrief,
)
from mlm_engine.utils.money import round2


def _user_brief(user: User | None) -> UserBrief | None:
    if user is None:
        return None
    return UserBrief(
        id=user.id,
        name=user.name,
        email=user.email,
        referral_code=user.referral_code,
    )


def _order_brief(order: Order | None) -> OrderBrief | None:
    if order is None:
        return None
    return OrderBrief(
        id=order.id,
        order_number=order.order_number,
        subtotal=order.subtotal,
        total_amount=order.total_amount,
        status=order.status,
    )


def commission_to_view(commission: MLMCommission) -> CommissionView:
    """
    Build a display row from a commission with relations loaded.

    Args:
        commission: Commission loaded with order, buyer and earner

    Returns:
        CommissionView
    """
    return CommissionView(
        id=commission.id,
        level=commission.level,
        base_amount=commission.base_amount,
        percent=commission.percent,
        amount=commission.amount,
        status=commission.status,
        note=commission.note,
        created_at=commission.created_at,
        order=_order_brief(commission.order),
        buyer=_user_brief(commission.buyer),
        earner=_user_brief(commission.earner),
    )


def _totals_from_stats(stats: dict[str, dict]) -> CommissionTotals:
    def amount(status: CommissionStatus) -> Decimal:
        return round2(Decimal(stats[status.value]["amount"]))

    return CommissionTotals(
        pending_amount=amount(CommissionStatus.PENDING),
        approved_amount=amount(CommissionStatus.APPROVED),
        paid_amount=amount(CommissionStatus.PAID),
        void_amount=amount(CommissionStatus.VOID),
    )


def _counts_from_stats(stats: dict[str, dict]) -> CommissionCounts:
    return CommissionCounts(
        pending_count=int(stats[CommissionStatus.PENDING.value]["count"]),
        approved_count=int(stats[CommissionStatus.APPROVED.value]["count"]),
        paid_count=int(stats[CommissionStatus.PAID.value]["count"]),
        void_count=int(stats[CommissionStatus.VOID.value]["count"]),
    )


class CommissionReportService(BaseService):
    """Provides commission aggregates and listings."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize report service."""
        super().__init__(session)
        self.commission_repo = MLMCommissionRepository(session)

    async def totals_by_status(self, earner_id: int) -> CommissionTotals:
        """
        Sum an earner's commission amounts per status.

        Args:
            earner_id: Earner user ID

        Returns:
            CommissionTotals; statuses without rows are 0
        """
        stats = await self.commission_repo.get_status_stats(earner_id)
        return _totals_from_stats(stats)

    async def counts_by_status(self, earner_id: int) -> CommissionCounts:
        """
        Count an earner's commissions per status.

        Args:
            earner_id: Earner user ID

        Returns:
            CommissionCounts; statuses without rows are 0
        """
        stats = await self.commission_repo.get_status_stats(earner_id)
        return _counts_from_stats(stats)

    async def recent_for_earner(
        self, earner_id: int, limit: int | None = None
    ) -> list[CommissionView]:
        """
        Get an earner's latest commissions with buyer and order context.

        Args:
            earner_id: Earner user ID
            limit: Max rows (default: RECENT_COMMISSIONS_LIMIT)

        Returns:
            Commission views, newest first
        """
        if limit is None:
            limit = settings.recent_commissions_limit
        rows = await self.commission_repo.get_recent_for_earner(
            earner_id, max(1, limit)
        )
        return [commission_to_view(row) for row in rows]

    async def earner_summary(
        self, earner_id: int, limit: int | None = None
    ) -> EarnerSummary:
        """
        Get totals, counts and recent commissions of one earner.

        Args:
            earner_id: Earner user ID
            limit: Max recent rows

        Returns:
            EarnerSummary
        """
        stats = await self.commission_repo.get_status_stats(earner_id)
        recent = await self.recent_for_earner(earner_id, limit)
        return EarnerSummary(
            totals=_totals_from_stats(stats),
            counts=_counts_from_stats(stats),
            recent=recent,
        )

    @log_operation
    async def list_commissions(
        self, status: str | None = None
    ) -> list[CommissionView]:
        """
        List all commissions for administration.

        Args:
            status: Optional status filter

        Returns:
            Commission views, newest first

        Raises:
            InvalidCommissionStatusError: If status filter is not a known status
        """
        status_filter = None
        if status:
            status_filter = parse_commission_status(status).value

        rows = await self.commission_repo.list_with_relations(status_filter)
        return [commission_to_view(row) for row in rows]
