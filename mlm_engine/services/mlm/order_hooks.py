"""
Order lifecycle hook.

Bridges order status changes to the commission engine. Commission
generation is best effort: a failure is logged and never reaches the
order update that triggered it.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_engine.models.order import Order, OrderStatus, parse_order_status
from mlm_engine.services.base_service import BaseService
from mlm_engine.services.mlm.commission_engine import CommissionEngine
from mlm_engine.services.mlm.config import FINALIZED_ORDER_STATUSES
from mlm_engine.services.mlm.types import CommissionResult
from mlm_engine.utils.exceptions import is_transient_store_error


def is_finalization(
    previous_status: OrderStatus | str | None,
    new_status: OrderStatus | str | None,
) -> bool:
    """
    Check if a status change is an order's first entry into a finalized state.

    Raw strings are normalized first (case, whitespace, known misspellings).

    Args:
        previous_status: Status before the change
        new_status: Status after the change

    Returns:
        True only for non-finalized -> finalized transitions
    """
    previous = parse_order_status(previous_status)
    new = parse_order_status(new_status)
    if new not in FINALIZED_ORDER_STATUSES:
        return False
    return previous not in FINALIZED_ORDER_STATUSES


class OrderLifecycleHook(BaseService):
    """
    Runs the commission engine when an order becomes finalized.

    Call it after the order's own status change has been committed: on
    failure the engine rolls back the shared session.
    """

    def __init__(
        self,
        session: AsyncSession,
        engine: CommissionEngine | None = None,
    ) -> None:
        """
        Initialize order hook.

        Args:
            session: Async database session
            engine: Commission engine (default: one bound to session)
        """
        super().__init__(session)
        self.engine = engine or CommissionEngine(session)

    async def on_status_changed(
        self,
        order: Order,
        previous_status: OrderStatus | str | None,
        new_status: OrderStatus | str | None,
        eligible_amount: Decimal | None = None,
    ) -> CommissionResult | None:
        """
        React to an order status change.

        Args:
            order: Order whose status changed
            previous_status: Status before the change
            new_status: Status after the change
            eligible_amount: Commission base (default: subtotal, then
                total amount, then 0)

        Returns:
            Engine result, or None if the change is not a finalization or
            the engine failed
        """
        if new_status and parse_order_status(new_status) is None:
            self.logger.warning(
                "Unknown order status",
                extra={"order_id": order.id, "status": str(new_status)},
            )

        if not is_finalization(previous_status, new_status):
            return None

        if eligible_amount is None:
            eligible_amount = order.eligible_amount

        try:
            return await self.engine.create_commissions_for_order(
                order, eligible_amount
            )
        except Exception as e:
            # Order finalization must never fail because of commissions
            self.logger.exception(
                "MLM commission create error",
                extra={
                    "order_id": order.id,
                    "error": str(e),
                    "transient": is_transient_store_error(e),
                },
            )
            return None
