"""Unit tests for the order status change hook."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from mlm_engine.models.order import OrderStatus
from mlm_engine.services.mlm.order_hooks import (
    OrderLifecycleHook,
    is_finalization,
)
from mlm_engine.services.mlm.types import CommissionResult


class TestIsFinalization:
    """Test finalization detection."""

    @pytest.mark.parametrize(
        "previous, new",
        [
            ("pending", "delivered"),
            ("shipped", "completed"),
            (None, "paid"),
            ("processing", "Delivered "),
            ("shipped", "deliverd"),
            ("something-else", "paid"),
        ],
    )
    def test_first_finalization(self, previous, new):
        assert is_finalization(previous, new) is True

    @pytest.mark.parametrize(
        "previous, new",
        [
            ("delivered", "completed"),
            ("paid", "paid"),
            ("deliverd", "delivered"),
            ("pending", "shipped"),
            ("delivered", "cancelled"),
            ("pending", "unknown"),
            ("pending", None),
        ],
    )
    def test_not_finalization(self, previous, new):
        assert is_finalization(previous, new) is False

    def test_enum_values(self):
        assert is_finalization(OrderStatus.SHIPPED, OrderStatus.PAID) is True


@pytest.fixture
def engine():
    """Mock commission engine."""
    engine = AsyncMock()
    engine.create_commissions_for_order = AsyncMock(
        return_value=CommissionResult(created_count=2, created_ids=[1, 2])
    )
    return engine


@pytest.fixture
def hook(mock_session, engine):
    """Create OrderLifecycleHook with a mocked engine."""
    return OrderLifecycleHook(mock_session, engine=engine)


@pytest.fixture
def order():
    """Order with subtotal and total."""
    order = MagicMock()
    order.id = 10
    order.user_id = 4
    order.eligible_amount = Decimal("80.00")
    return order


class TestOrderLifecycleHook:
    """Test on_status_changed."""

    @pytest.mark.asyncio
    async def test_finalization_runs_engine(self, hook, engine, order):
        """First finalization creates commissions on the eligible amount."""
        result = await hook.on_status_changed(order, "shipped", "delivered")

        assert result.created_count == 2
        engine.create_commissions_for_order.assert_awaited_once_with(
            order, Decimal("80.00")
        )

    @pytest.mark.asyncio
    async def test_explicit_amount(self, hook, engine, order):
        """An explicit amount overrides the order's."""
        await hook.on_status_changed(
            order, "pending", "paid", eligible_amount=Decimal("50")
        )

        engine.create_commissions_for_order.assert_awaited_once_with(
            order, Decimal("50")
        )

    @pytest.mark.asyncio
    async def test_non_finalizing_change_ignored(self, hook, engine, order):
        """Changes between non-finalized states do nothing."""
        assert await hook.on_status_changed(order, "pending", "shipped") is None
        engine.create_commissions_for_order.assert_not_called()

    @pytest.mark.asyncio
    async def test_repeat_finalization_ignored(self, hook, engine, order):
        """Moving between finalized states does nothing."""
        assert (
            await hook.on_status_changed(order, "delivered", "completed")
            is None
        )
        engine.create_commissions_for_order.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_status_ignored(self, hook, engine, order):
        """Unknown statuses are not finalization."""
        assert await hook.on_status_changed(order, "pending", "lost") is None
        engine.create_commissions_for_order.assert_not_called()

    @pytest.mark.asyncio
    async def test_engine_failure_swallowed(self, hook, engine, order):
        """Engine errors never reach the order update."""
        engine.create_commissions_for_order.side_effect = RuntimeError("boom")

        result = await hook.on_status_changed(order, "shipped", "delivered")

        assert result is None
