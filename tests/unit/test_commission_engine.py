"""
Unit tests for the commission engine.

Tests cover:
- Per-level amounts and ledger rows
- Inactive ancestors
- Every business-rule skip
- Rows that already existed
"""

from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal

import pytest

from mlm_engine.services.mlm.types import LevelRate, SkipReason


@pytest.fixture
def chain(user_graph):
    """Users 1 <- 2 <- 3 <- 4 (4 is the buyer)."""
    user_graph.add(1)
    user_graph.add(2, referred_by_id=1)
    user_graph.add(3, referred_by_id=2)
    user_graph.add(4, referred_by_id=3)
    return user_graph


class TestCommissionCreation:
    """Test commissions for a full upline."""

    @pytest.mark.asyncio
    async def test_three_levels_paid(
        self, engine, chain, commission_repo, mock_order, program_settings
    ):
        """Each ancestor gets its level percent of the order."""
        result = await engine.create_commissions_for_order(
            mock_order, Decimal("1000"), program_settings
        )

        assert result.created_count == 3
        assert result.skip_reason is None
        assert result.created_ids == [1, 2, 3]

        rows = commission_repo.rows
        assert [r["earner_id"] for r in rows] == [3, 2, 1]
        assert [r["level"] for r in rows] == [1, 2, 3]
        assert [r["amount"] for r in rows] == [
            Decimal("100.00"),
            Decimal("50.00"),
            Decimal("20.00"),
        ]
        assert all(r["buyer_id"] == 4 for r in rows)
        assert all(r["base_amount"] == Decimal("1000") for r in rows)

    @pytest.mark.asyncio
    async def test_amount_rounded_half_up(
        self, engine, chain, commission_repo, mock_order, program_settings
    ):
        """Amounts are rounded to cents, half up."""
        settings = replace(
            program_settings, levels=(LevelRate(1, Decimal("2.5")),)
        )

        await engine.create_commissions_for_order(
            mock_order, Decimal("0.50"), settings
        )

        # 0.50 * 2.5% = 0.0125 -> 0.01
        assert commission_repo.rows[0]["amount"] == Decimal("0.01")

    @pytest.mark.asyncio
    async def test_float_amount_accepted(
        self, engine, chain, commission_repo, mock_order, program_settings
    ):
        """Float amounts keep their decimal value."""
        await engine.create_commissions_for_order(
            mock_order, 19.99, program_settings
        )

        assert commission_repo.rows[0]["base_amount"] == Decimal("19.99")
        assert commission_repo.rows[0]["amount"] == Decimal("2.00")

    @pytest.mark.asyncio
    async def test_inactive_ancestor_skipped_levels_kept(
        self, engine, user_graph, commission_repo, mock_order, program_settings
    ):
        """An inactive level-2 ancestor earns nothing; level 3 still does."""
        user_graph.add(1)
        user_graph.add(2, referred_by_id=1, mlm_active=False)
        user_graph.add(3, referred_by_id=2)
        user_graph.add(4, referred_by_id=3)

        result = await engine.create_commissions_for_order(
            mock_order, Decimal("1000"), program_settings
        )

        assert result.created_count == 2
        assert [r["earner_id"] for r in commission_repo.rows] == [3, 1]
        assert [r["level"] for r in commission_repo.rows] == [1, 3]
        assert commission_repo.rows[1]["percent"] == Decimal("2")

    @pytest.mark.asyncio
    async def test_short_upline(
        self, engine, user_graph, commission_repo, mock_order, program_settings
    ):
        """Only existing ancestors are paid."""
        user_graph.add(3)
        user_graph.add(4, referred_by_id=3)

        result = await engine.create_commissions_for_order(
            mock_order, Decimal("1000"), program_settings
        )

        assert result.created_count == 1
        assert commission_repo.rows[0]["earner_id"] == 3

    @pytest.mark.asyncio
    async def test_zero_percent_level_skipped(
        self, engine, chain, commission_repo, mock_order, program_settings
    ):
        """Levels with 0% create no row."""
        settings = replace(
            program_settings,
            levels=(
                LevelRate(1, Decimal("10")),
                LevelRate(2, Decimal("0")),
                LevelRate(3, Decimal("2")),
            ),
        )

        result = await engine.create_commissions_for_order(
            mock_order, Decimal("1000"), settings
        )

        assert result.created_count == 2
        assert [r["earner_id"] for r in commission_repo.rows] == [3, 1]

    @pytest.mark.asyncio
    async def test_amount_rounding_to_zero_skipped(
        self, engine, chain, commission_repo, mock_order, program_settings
    ):
        """Commissions that round to 0.00 are not recorded."""
        result = await engine.create_commissions_for_order(
            mock_order, Decimal("0.01"), program_settings
        )

        assert result.created_count == 0
        assert result.skip_reason is None
        commission_repo.create_if_absent.assert_not_called()

    @pytest.mark.asyncio
    async def test_existing_rows_not_counted(
        self, engine, chain, commission_repo, mock_order, program_settings
    ):
        """Rows that already existed for (order, earner) are not counted."""
        commission_repo.create_if_absent.side_effect = [None, 7, None]

        result = await engine.create_commissions_for_order(
            mock_order, Decimal("1000"), program_settings
        )

        assert result.created_count == 1
        assert result.created_ids == [7]

    @pytest.mark.asyncio
    async def test_commits_on_success(
        self, engine, chain, mock_session, mock_order, program_settings
    ):
        """Engine commits its writes."""
        await engine.create_commissions_for_order(
            mock_order, Decimal("1000"), program_settings
        )

        mock_session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_store_failure_rolls_back(
        self, engine, chain, commission_repo, mock_session, mock_order,
        program_settings
    ):
        """Store errors roll back and propagate."""
        commission_repo.create_if_absent.side_effect = RuntimeError("db down")

        with pytest.raises(RuntimeError):
            await engine.create_commissions_for_order(
                mock_order, Decimal("1000"), program_settings
            )

        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_settings_loaded_when_not_given(
        self, engine, chain, commission_repo, mock_order, program_settings
    ):
        """Without a snapshot the settings service is consulted."""
        engine.settings_service.load.return_value = program_settings

        result = await engine.create_commissions_for_order(
            mock_order, Decimal("1000")
        )

        engine.settings_service.load.assert_awaited_once()
        assert result.created_count == 3


class TestCommissionSkips:
    """Test business-rule skips."""

    @pytest.mark.asyncio
    async def test_disabled(
        self, engine, chain, commission_repo, mock_order, program_settings
    ):
        """Disabled program creates nothing."""
        settings = replace(program_settings, is_enabled=False)

        result = await engine.create_commissions_for_order(
            mock_order, Decimal("1000"), settings
        )

        assert result.skipped
        assert result.skip_reason == SkipReason.DISABLED
        assert result.created_count == 0
        commission_repo.create_if_absent.assert_not_called()

    @pytest.mark.asyncio
    async def test_below_minimum(
        self, engine, chain, mock_order, program_settings
    ):
        """Orders under the minimum are skipped."""
        settings = replace(program_settings, min_order_amount=Decimal("100"))

        result = await engine.create_commissions_for_order(
            mock_order, Decimal("50"), settings
        )

        assert result.skip_reason == SkipReason.BELOW_MIN

    @pytest.mark.asyncio
    async def test_minimum_is_inclusive(
        self, engine, chain, mock_order, program_settings
    ):
        """An order exactly at the minimum qualifies."""
        settings = replace(program_settings, min_order_amount=Decimal("100"))

        result = await engine.create_commissions_for_order(
            mock_order, Decimal("100"), settings
        )

        assert result.skip_reason is None
        assert result.created_count == 3

    @pytest.mark.asyncio
    async def test_already_created(
        self, engine, chain, commission_repo, mock_order, program_settings
    ):
        """Orders with ledger rows are skipped in one-per-order mode."""
        commission_repo.exists_for_order.return_value = True

        result = await engine.create_commissions_for_order(
            mock_order, Decimal("1000"), program_settings
        )

        assert result.skip_reason == SkipReason.ALREADY_CREATED
        commission_repo.create_if_absent.assert_not_called()

    @pytest.mark.asyncio
    async def test_existing_rows_ignored_without_one_per_order(
        self, engine, chain, commission_repo, mock_order, program_settings
    ):
        """Without one-per-order the order level check is not made."""
        settings = replace(program_settings, one_commission_per_order=False)
        commission_repo.exists_for_order.return_value = True

        result = await engine.create_commissions_for_order(
            mock_order, Decimal("1000"), settings
        )

        commission_repo.exists_for_order.assert_not_called()
        assert result.created_count == 3

    @pytest.mark.asyncio
    async def test_no_buyer(self, engine, chain, mock_order, program_settings):
        """Orders without a buyer are skipped."""
        mock_order.user_id = None

        result = await engine.create_commissions_for_order(
            mock_order, Decimal("1000"), program_settings
        )

        assert result.skip_reason == SkipReason.NO_BUYER

    @pytest.mark.asyncio
    async def test_unknown_buyer(
        self, engine, chain, mock_order, program_settings
    ):
        """A buyer missing from the store has no referrer."""
        mock_order.user_id = 99

        result = await engine.create_commissions_for_order(
            mock_order, Decimal("1000"), program_settings
        )

        assert result.skip_reason == SkipReason.NO_REFERRER

    @pytest.mark.asyncio
    async def test_no_referrer(
        self, engine, user_graph, mock_order, program_settings
    ):
        """Buyers nobody referred are skipped."""
        user_graph.add(4)

        result = await engine.create_commissions_for_order(
            mock_order, Decimal("1000"), program_settings
        )

        assert result.skip_reason == SkipReason.NO_REFERRER

    @pytest.mark.asyncio
    async def test_self_referral(
        self, engine, user_graph, commission_repo, mock_order,
        program_settings
    ):
        """A buyer referred by themselves is skipped."""
        user_graph.add(4, referred_by_id=4)

        result = await engine.create_commissions_for_order(
            mock_order, Decimal("1000"), program_settings
        )

        assert result.skip_reason == SkipReason.SELF_REF
        commission_repo.create_if_absent.assert_not_called()

    @pytest.mark.asyncio
    async def test_self_referral_allowed_pays_nobody(
        self, engine, user_graph, commission_repo, mock_order,
        program_settings
    ):
        """With the guard off a self loop still never pays the buyer."""
        user_graph.add(4, referred_by_id=4)
        settings = replace(program_settings, prevent_self_referral=False)

        result = await engine.create_commissions_for_order(
            mock_order, Decimal("1000"), settings
        )

        assert result.skip_reason is None
        assert result.created_count == 0
        commission_repo.create_if_absent.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_levels(self, engine, chain, mock_order, program_settings):
        """A program without levels is skipped."""
        settings = replace(program_settings, levels=())

        result = await engine.create_commissions_for_order(
            mock_order, Decimal("1000"), settings
        )

        assert result.skip_reason == SkipReason.NO_LEVELS

    @pytest.mark.asyncio
    async def test_invalid_amount_raises(
        self, engine, chain, mock_order, program_settings
    ):
        """Non-numeric amounts are rejected."""
        with pytest.raises(ValueError):
            await engine.create_commissions_for_order(
                mock_order, "abc", program_settings
            )


class TestLedgerSnapshotPrecision:
    """Stored base and percent reproduce the stored amount."""

    @pytest.mark.asyncio
    async def test_percent_rounded_to_column_scale(
        self, engine, chain, commission_repo, mock_order, program_settings
    ):
        """Amount is computed from the percent as it will be stored."""
        settings = replace(
            program_settings, levels=(LevelRate(1, Decimal("5.12345")),)
        )

        await engine.create_commissions_for_order(
            mock_order, Decimal("1000"), settings
        )

        row = commission_repo.rows[0]
        assert row["percent"] == Decimal("5.1235")
        assert row["amount"] == Decimal("51.24")

    @pytest.mark.asyncio
    async def test_base_rounded_to_cents(
        self, engine, chain, commission_repo, mock_order, program_settings
    ):
        """Sub-cent eligible amounts are rounded before applying percents."""
        await engine.create_commissions_for_order(
            mock_order, Decimal("999.995"), program_settings
        )

        rows = commission_repo.rows
        assert rows[0]["base_amount"] == Decimal("1000.00")
        assert [r["amount"] for r in rows] == [
            Decimal("100.00"),
            Decimal("50.00"),
            Decimal("20.00"),
        ]

    @pytest.mark.asyncio
    async def test_stored_fields_reproduce_amount(
        self, engine, chain, commission_repo, mock_order, program_settings
    ):
        settings = replace(
            program_settings,
            levels=(
                LevelRate(1, Decimal("3.33335")),
                LevelRate(2, Decimal("0.12345")),
            ),
        )

        await engine.create_commissions_for_order(
            mock_order, Decimal("77.777"), settings
        )

        for row in commission_repo.rows:
            expected = (row["base_amount"] * row["percent"] / 100).quantize(
                Decimal("0.01"), rounding=ROUND_HALF_UP
            )
            assert row["amount"] == expected
