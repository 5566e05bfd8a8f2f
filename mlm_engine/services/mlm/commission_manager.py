"""
Commission administration module.

Status and note changes on ledger rows.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_engine.models.mlm_commission import parse_commission_status
from mlm_engine.repositories.mlm_commission_repository import (
    MLMCommissionRepository,
)
from mlm_engine.services.base_service import BaseService, transaction
from mlm_engine.services.mlm.statistics import commission_to_view
from mlm_engine.services.mlm.types import CommissionView
from mlm_engine.utils.exceptions import CommissionNotFoundError


class CommissionManager(BaseService):
    """Applies administrative changes to commissions."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize commission manager."""
        super().__init__(session)
        self.commission_repo = MLMCommissionRepository(session)

    @transaction
    async def update_status(
        self,
        commission_id: int,
        new_status: str,
        note: str | None = None,
    ) -> CommissionView:
        """
        Set the status (and optionally the note) of a commission.

        Any status may follow any other; payout reconciliation happens
        outside this system. An empty note leaves the stored note as is.

        Args:
            commission_id: Commission ID
            new_status: pending, approved, paid or void
            note: Optional admin note

        Returns:
            Updated commission view

        Raises:
            InvalidCommissionStatusError: If new_status is unknown
            CommissionNotFoundError: If the commission does not exist
        """
        status = parse_commission_status(new_status)

        commission = await self.commission_repo.set_status(
            commission_id, status.value, note=note or None
        )
        if commission is None:
            raise CommissionNotFoundError(commission_id)

        self.logger.info(
            "MLM commission status updated",
            extra={
                "commission_id": commission_id,
                "status": status.value,
                "note_changed": bool(note),
            },
        )

        return commission_to_view(commission)
