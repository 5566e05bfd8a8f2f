"""Unit tests for the commission ledger table definition."""

import pytest

from mlm_engine.models import MLMCommission


class TestLedgerForeignKeys:
    """Referenced orders and users cannot be deleted."""

    @pytest.mark.parametrize("column", ["order_id", "earner_id", "buyer_id"])
    def test_delete_restricted(self, column):
        foreign_keys = MLMCommission.__table__.c[column].foreign_keys

        assert len(foreign_keys) == 1
        assert next(iter(foreign_keys)).ondelete == "RESTRICT"

    def test_unique_order_earner(self):
        constraint_names = {
            c.name for c in MLMCommission.__table__.constraints
        }

        assert "uq_mlm_commission_order_earner" in constraint_names
