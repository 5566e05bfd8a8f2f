"""
Commission engine.

Turns a finalized order into pending commission ledger rows for the
buyer's upline.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_engine.models.order import Order
from mlm_engine.repositories.mlm_commission_repository import (
    MLMCommissionRepository,
)
from mlm_engine.repositories.user_repository import UserRepository
from mlm_engine.services.base_service import BaseService, transaction
from mlm_engine.services.mlm.chain_manager import ReferralChainManager
from mlm_engine.services.mlm.settings_service import CommissionSettingsService
from mlm_engine.services.mlm.types import (
    CommissionResult,
    CommissionSettings,
    SkipReason,
)
from mlm_engine.utils.money import (
    percent_of,
    round2,
    round_percent,
    to_decimal,
)


class CommissionEngine(BaseService):
    """
    Creates referral commissions for finalized orders.

    Safe to call more than once for the same order: the order level check
    skips orders that already have ledger rows, and every row is inserted
    with INSERT ... ON CONFLICT DO NOTHING on (order_id, earner_id), which
    also covers concurrent calls racing past the order level check.
    """

    def __init__(
        self,
        session: AsyncSession,
        settings_service: CommissionSettingsService | None = None,
    ) -> None:
        """
        Initialize commission engine.

        Args:
            session: Async database session
            settings_service: Settings source (default: stored settings
                with the built-in fallback)
        """
        super().__init__(session)
        self.settings_service = settings_service or CommissionSettingsService(
            session
        )
        self.user_repo = UserRepository(session)
        self.commission_repo = MLMCommissionRepository(session)
        self.chain_manager = ReferralChainManager(session)

    @transaction
    async def create_commissions_for_order(
        self,
        order: Order,
        eligible_amount: Decimal | int | float | str,
        settings: CommissionSettings | None = None,
    ) -> CommissionResult:
        """
        Create pending commissions for the upline of an order's buyer.

        Business-rule skips are returned, never raised. Only store
        failures raise (after rollback).

        Args:
            order: Finalized order (``id`` and ``user_id`` are read)
            eligible_amount: Base the level percents apply to
            settings: Settings snapshot to use instead of loading them

        Returns:
            CommissionResult with the number of rows inserted by this call,
            or a skip reason

        Raises:
            ValueError: If eligible_amount is not a number
        """
        # Same precision as the stored base_amount and percent columns
        base_amount = round2(to_decimal(eligible_amount))
        if settings is None:
            settings = await self.settings_service.load()

        if not settings.is_enabled:
            return self._skip(order, SkipReason.DISABLED)

        if base_amount < settings.min_order_amount:
            return self._skip(order, SkipReason.BELOW_MIN)

        if settings.one_commission_per_order:
            if await self.commission_repo.exists_for_order(order.id):
                return self._skip(order, SkipReason.ALREADY_CREATED)

        buyer_id = order.user_id
        if buyer_id is None:
            return self._skip(order, SkipReason.NO_BUYER)

        buyer = await self.user_repo.get_upline_member(buyer_id)
        if buyer is None or buyer.referred_by_id is None:
            return self._skip(order, SkipReason.NO_REFERRER)

        if settings.prevent_self_referral and buyer.referred_by_id == buyer.id:
            return self._skip(order, SkipReason.SELF_REF)

        max_levels = settings.max_levels
        if max_levels == 0:
            return self._skip(order, SkipReason.NO_LEVELS)

        chain = await self.chain_manager.get_upline_chain(buyer, max_levels)

        result = CommissionResult()
        for index, earner in enumerate(chain):
            if index >= len(settings.levels):
                break
            if not earner.mlm_active:
                continue

            percent = round_percent(settings.levels[index].percent)
            if percent <= 0:
                continue

            amount = percent_of(base_amount, percent)
            if amount <= 0:
                continue

            level = index + 1
            commission_id = await self.commission_repo.create_if_absent(
                order_id=order.id,
                earner_id=earner.id,
                buyer_id=buyer.id,
                level=level,
                base_amount=base_amount,
                percent=percent,
                amount=amount,
            )
            if commission_id is None:
                self.logger.debug(
                    "Commission already exists",
                    extra={
                        "order_id": order.id,
                        "earner_id": earner.id,
                        "level": level,
                    },
                )
                continue

            result.created_count += 1
            result.created_ids.append(commission_id)

            self.logger.info(
                "MLM commission created",
                extra={
                    "commission_id": commission_id,
                    "order_id": order.id,
                    "earner_id": earner.id,
                    "buyer_id": buyer.id,
                    "level": level,
                    "percent": str(percent),
                    "amount": str(amount),
                },
            )

        self.logger.info(
            "MLM commissions processed",
            extra={
                "order_id": order.id,
                "buyer_id": buyer.id,
                "base_amount": str(base_amount),
                "chain_length": len(chain),
                "created_count": result.created_count,
            },
        )

        return result

    def _skip(self, order: Order, reason: SkipReason) -> CommissionResult:
        """Log a business-rule skip and build its result."""
        self.logger.debug(
            "MLM commissions skipped",
            extra={"order_id": order.id, "reason": reason.value},
        )
        return CommissionResult(created_count=0, skip_reason=reason)
