"""
MLM commission repository.

Data access layer for the MLMCommission ledger.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mlm_engine.models.mlm_commission import CommissionStatus, MLMCommission
from mlm_engine.repositories.base import BaseRepository

# Unique key of a ledger row
LEDGER_KEY = ["order_id", "earner_id"]


class MLMCommissionRepository(BaseRepository[MLMCommission]):
    """Commission ledger repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize commission repository."""
        super().__init__(MLMCommission, session)

    async def exists_for_order(self, order_id: int) -> bool:
        """
        Check if any commission references an order.

        Args:
            order_id: Order ID

        Returns:
            True if at least one ledger row exists for the order
        """
        return await self.exists(order_id=order_id)

    async def create_if_absent(
        self,
        order_id: int,
        earner_id: int,
        buyer_id: int,
        level: int,
        base_amount: Decimal,
        percent: Decimal,
        amount: Decimal,
    ) -> int | None:
        """
        Insert a pending commission unless (order, earner) already has one.

        Args:
            order_id: Order ID
            earner_id: Upline user ID
            buyer_id: Buyer user ID
            level: Upline depth
            base_amount: Eligible base amount
            percent: Level percent
            amount: Commission amount

        Returns:
            New commission ID, or None if the pair already existed
        """
        return await self.insert_if_absent(
            LEDGER_KEY,
            order_id=order_id,
            earner_id=earner_id,
            buyer_id=buyer_id,
            level=level,
            base_amount=base_amount,
            percent=percent,
            amount=amount,
            status=CommissionStatus.PENDING.value,
        )

    async def get_status_stats(
        self, earner_id: int
    ) -> dict[str, dict[str, int | Decimal]]:
        """
        Get commission amount and count per status in a single query.

        Args:
            earner_id: Earner user ID

        Returns:
            Dict mapping every status to {"amount": Decimal, "count": int};
            statuses without rows report zeros
        """
        stmt = (
            select(
                MLMCommission.status,
                func.coalesce(
                    func.sum(MLMCommission.amount), Decimal("0")
                ).label("amount"),
                func.count(MLMCommission.id).label("count"),
            )
            .where(MLMCommission.earner_id == earner_id)
            .group_by(MLMCommission.status)
        )

        result = await self.session.execute(stmt)
        rows = result.all()

        # Build result dict with all statuses (default to 0)
        stats: dict[str, dict[str, int | Decimal]] = {
            status.value: {"amount": Decimal("0"), "count": 0}
            for status in CommissionStatus
        }
        for row in rows:
            if row.status not in stats:
                continue
            stats[row.status] = {
                "amount": Decimal(str(row.amount)),
                "count": row.count,
            }

        return stats

    async def get_recent_for_earner(
        self, earner_id: int, limit: int
    ) -> list[MLMCommission]:
        """
        Get an earner's latest commissions with order and buyer loaded.

        Args:
            earner_id: Earner user ID
            limit: Max rows

        Returns:
            Commissions, newest first
        """
        stmt = (
            select(MLMCommission)
            .options(
                selectinload(MLMCommission.order),
                selectinload(MLMCommission.buyer),
                selectinload(MLMCommission.earner),
            )
            .where(MLMCommission.earner_id == earner_id)
            .order_by(MLMCommission.created_at.desc(), MLMCommission.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_with_relations(
        self, status: str | None = None
    ) -> list[MLMCommission]:
        """
        Get all commissions with order, buyer and earner loaded.

        Args:
            status: Optional status filter

        Returns:
            Commissions, newest first
        """
        stmt = select(MLMCommission).options(
            selectinload(MLMCommission.order),
            selectinload(MLMCommission.buyer),
            selectinload(MLMCommission.earner),
        )
        if status:
            stmt = stmt.where(MLMCommission.status == status)
        stmt = stmt.order_by(
            MLMCommission.created_at.desc(), MLMCommission.id.desc()
        )

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_order(self, order_id: int) -> list[MLMCommission]:
        """
        Get commissions produced by an order, by level.

        Args:
            order_id: Order ID

        Returns:
            Commissions ordered by level
        """
        stmt = (
            select(MLMCommission)
            .where(MLMCommission.order_id == order_id)
            .order_by(MLMCommission.level)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_with_relations(
        self, commission_id: int
    ) -> MLMCommission | None:
        """
        Get a commission with order, buyer and earner loaded.

        Args:
            commission_id: Commission ID

        Returns:
            Commission or None if not found
        """
        stmt = (
            select(MLMCommission)
            .options(
                selectinload(MLMCommission.order),
                selectinload(MLMCommission.buyer),
                selectinload(MLMCommission.earner),
            )
            .where(MLMCommission.id == commission_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def set_status(
        self,
        commission_id: int,
        status: str,
        note: str | None = None,
    ) -> MLMCommission | None:
        """
        Change status (and note, when given) of a commission.

        Args:
            commission_id: Commission ID
            status: Validated status value
            note: New admin note; None keeps the stored note

        Returns:
            Updated commission with relations loaded, or None if not found
        """
        commission = await self.get_with_relations(commission_id)
        if commission is None:
            return None

        commission.status = status
        if note is not None:
            commission.note = note

        await self.session.flush()
        return commission
