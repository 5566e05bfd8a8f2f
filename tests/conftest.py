"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Минимальные переменные окружения для тестов (SQLite в памяти)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

# Добавить корень проекта в PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import itertools
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from mlm_engine.models import Base, MLMCommission, Order, OrderStatus, User


@pytest.fixture
def mock_session():
    """Mock AsyncSession для тестов без БД."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.delete = MagicMock()
    session.refresh = AsyncMock()
    return session


@pytest_asyncio.fixture
async def db_engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Session on the in-memory database."""
    session_maker = async_sessionmaker(
        bind=db_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_maker() as session:
        yield session


@pytest.fixture
def make_user(db_session):
    """Factory: create a user, optionally referred by another user."""
    counter = itertools.count(1)

    async def _make_user(
        referrer: User | None = None,
        mlm_active: bool = True,
        name: str | None = None,
        referral_code: str | None = None,
    ) -> User:
        n = next(counter)
        user = User(
            name=name or f"User {n}",
            email=f"user{n}@example.com",
            referral_code=referral_code or f"TNTEST{n:02d}",
            referred_by_id=referrer.id if referrer else None,
            mlm_active=mlm_active,
        )
        db_session.add(user)
        await db_session.commit()
        return user

    return _make_user


@pytest.fixture
def make_order(db_session):
    """Factory: create an order for a buyer."""
    counter = itertools.count(1)

    async def _make_order(
        buyer: User | None,
        subtotal: Decimal | None = Decimal("1000"),
        total_amount: Decimal | None = None,
        status: str = OrderStatus.PENDING.value,
    ) -> Order:
        order = Order(
            order_number=f"ORD-{next(counter):05d}",
            user_id=buyer.id if buyer else None,
            subtotal=subtotal,
            total_amount=total_amount,
            status=status,
        )
        db_session.add(order)
        await db_session.commit()
        return order

    return _make_order


@pytest.fixture
def make_commission(db_session):
    """Factory: insert a ledger row directly."""

    async def _make_commission(
        order: Order,
        earner: User,
        buyer: User,
        amount: Decimal = Decimal("10.00"),
        status: str = "pending",
        level: int = 1,
    ) -> MLMCommission:
        commission = MLMCommission(
            order_id=order.id,
            earner_id=earner.id,
            buyer_id=buyer.id,
            level=level,
            base_amount=Decimal("100.00"),
            percent=Decimal("10"),
            amount=amount,
            status=status,
        )
        db_session.add(commission)
        await db_session.commit()
        return commission

    return _make_commission
