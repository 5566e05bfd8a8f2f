"""
User repository.

Data access layer for User model and the referral graph stored on it.
"""

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mlm_engine.models.user import User
from mlm_engine.repositories.base import BaseRepository


@dataclass(frozen=True)
class UplineMember:
    """Referral fields of a user, as seen by the upline walk."""

    id: int
    referred_by_id: int | None
    mlm_active: bool


class UserRepository(BaseRepository[User]):
    """User repository with referral graph queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user repository."""
        super().__init__(User, session)

    async def get_by_referral_code(
        self, referral_code: str
    ) -> User | None:
        """
        Get user by referral code.

        Args:
            referral_code: Referral code

        Returns:
            User or None
        """
        return await self.get_by(referral_code=referral_code)

    async def get_by_email(self, email: str) -> User | None:
        """
        Get user by email (case-insensitive).

        Args:
            email: Email address

        Returns:
            User or None
        """
        if not email:
            return None
        stmt = (
            select(User)
            .where(func.lower(User.email) == email.strip().lower())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def referral_code_exists(self, referral_code: str) -> bool:
        """Check if a referral code is already taken."""
        return await self.exists(referral_code=referral_code)

    async def get_upline_member(
        self, user_id: int
    ) -> UplineMember | None:
        """
        Get the referral fields of a user.

        Only id, referred_by_id and mlm_active are fetched.

        Args:
            user_id: User ID

        Returns:
            UplineMember or None if user does not exist
        """
        stmt = select(
            User.id, User.referred_by_id, User.mlm_active
        ).where(User.id == user_id)
        result = await self.session.execute(stmt)
        row = result.one_or_none()
        if row is None:
            return None
        return UplineMember(
            id=row.id,
            referred_by_id=row.referred_by_id,
            mlm_active=bool(row.mlm_active),
        )

    async def get_direct_referrer(
        self, user_id: int
    ) -> UplineMember | None:
        """
        Get the direct upline of a user.

        Args:
            user_id: User ID

        Returns:
            Referrer as UplineMember, or None if the user has no referrer
            (or the user / referrer row is missing)
        """
        member = await self.get_upline_member(user_id)
        if member is None or member.referred_by_id is None:
            return None
        return await self.get_upline_member(member.referred_by_id)

    async def get_direct_children(
        self,
        user_id: int,
        limit: int,
        newest_first: bool = True,
    ) -> list[User]:
        """
        Get users directly referred by a user.

        Args:
            user_id: Referrer user ID
            limit: Max number of children to return
            newest_first: Order by registration time descending

        Returns:
            List of referred users
        """
        if newest_first:
            order_by = (User.created_at.desc(), User.id.desc())
        else:
            order_by = (User.created_at.asc(), User.id.asc())

        stmt = (
            select(User)
            .where(User.referred_by_id == user_id)
            .order_by(*order_by)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_direct_children(self, user_id: int) -> int:
        """
        Count users directly referred by a user.

        Args:
            user_id: Referrer user ID

        Returns:
            Number of direct referrals
        """
        return await self.count(referred_by_id=user_id)

    async def resolve_by_identifier(
        self, identifier: str | int
    ) -> User | None:
        """
        Find a user by ID, referral code or email.

        Tried in that order; the first match wins.

        Args:
            identifier: User ID, referral code or email

        Returns:
            User or None
        """
        if isinstance(identifier, int):
            return await self.get_by_id(identifier)

        query = (identifier or "").strip()
        if not query:
            return None

        if query.isdigit():
            user = await self.get_by_id(int(query))
            if user:
                return user

        user = await self.get_by_referral_code(query)
        if user:
            return user

        return await self.get_by_email(query)
