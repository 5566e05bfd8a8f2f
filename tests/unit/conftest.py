"""
Shared fixtures for unit tests.

This module provides common fixtures used across multiple test modules:
- In-memory user graph standing in for the users table
- CommissionEngine wired to mocked repositories
- Settings snapshots
"""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from mlm_engine.repositories.user_repository import UplineMember
from mlm_engine.services.mlm.commission_engine import CommissionEngine
from mlm_engine.services.mlm.types import CommissionSettings, LevelRate


class FakeUserGraph:
    """
    Users keyed by ID, served the way UserRepository.get_upline_member does.

    Counts lookups so tests can assert the upline walk terminates.
    """

    def __init__(self) -> None:
        self.members: dict[int, UplineMember] = {}
        self.lookups = 0

    def add(
        self,
        user_id: int,
        referred_by_id: int | None = None,
        mlm_active: bool = True,
    ) -> UplineMember:
        member = UplineMember(
            id=user_id, referred_by_id=referred_by_id, mlm_active=mlm_active
        )
        self.members[user_id] = member
        return member

    async def get_upline_member(self, user_id: int) -> UplineMember | None:
        self.lookups += 1
        return self.members.get(user_id)


@pytest.fixture
def user_graph():
    """
    Create empty user graph.

    Returns:
        FakeUserGraph: Graph to populate per test
    """
    return FakeUserGraph()


@pytest.fixture
def commission_repo():
    """
    Mock commission repository.

    create_if_absent hands out IDs 1, 2, 3, ... and records the rows.

    Returns:
        AsyncMock: Mocked MLMCommissionRepository
    """
    repo = AsyncMock()
    repo.exists_for_order = AsyncMock(return_value=False)
    repo.rows = []

    async def create_if_absent(**row):
        repo.rows.append(row)
        return len(repo.rows)

    repo.create_if_absent = AsyncMock(side_effect=create_if_absent)
    return repo


@pytest.fixture
def engine(mock_session, user_graph, commission_repo):
    """
    Create CommissionEngine with mocked data access.

    Args:
        mock_session: Mocked database session
        user_graph: In-memory users
        commission_repo: Mocked ledger

    Returns:
        CommissionEngine: Engine instance for testing
    """
    engine = CommissionEngine(mock_session, settings_service=AsyncMock())
    engine.user_repo.get_upline_member = user_graph.get_upline_member
    engine.chain_manager.user_repo.get_upline_member = (
        user_graph.get_upline_member
    )
    engine.commission_repo = commission_repo
    return engine


@pytest.fixture
def program_settings():
    """Default-like 10% / 5% / 2% program."""
    return CommissionSettings(
        is_enabled=True,
        levels=(
            LevelRate(1, Decimal("10")),
            LevelRate(2, Decimal("5")),
            LevelRate(3, Decimal("2")),
        ),
        min_order_amount=Decimal("0"),
        prevent_self_referral=True,
        one_commission_per_order=True,
    )


@pytest.fixture
def mock_order():
    """Create mock order object bought by user 4."""
    order = MagicMock()
    order.id = 1
    order.user_id = 4
    return order
