"""
Referral chain management module.

Walks the upline of a user along referred_by links.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from mlm_engine.repositories.user_repository import (
    UplineMember,
    UserRepository,
)


class ReferralChainManager:
    """Manages referral chain operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize chain manager."""
        self.session = session
        self.user_repo = UserRepository(session)

    async def get_upline_chain(
        self, start: UplineMember, max_levels: int
    ) -> list[UplineMember]:
        """
        Get the ancestors of a user, nearest first.

        Follows referred_by one hop per level. Stops at max_levels, at a
        user without referrer, at a dangling reference, or when an id
        repeats (a corrupted cycle). The start user counts as visited, so
        a cycle never leads back to them.

        Args:
            start: User whose upline is walked
            max_levels: Maximum number of ancestors

        Returns:
            [level 1 ancestor, level 2 ancestor, ...], at most max_levels long
        """
        visited = {start.id}
        chain: list[UplineMember] = []
        current = start

        while len(chain) < max_levels:
            referrer_id = current.referred_by_id
            if referrer_id is None:
                break

            if referrer_id in visited:
                logger.warning(
                    "Referral cycle detected",
                    extra={
                        "start_user_id": start.id,
                        "repeated_user_id": referrer_id,
                        "chain_ids": [member.id for member in chain],
                    },
                )
                break
            visited.add(referrer_id)

            referrer = await self.user_repo.get_upline_member(referrer_id)
            if referrer is None:
                logger.warning(
                    "Referrer not found while walking upline",
                    extra={
                        "start_user_id": start.id,
                        "missing_user_id": referrer_id,
                    },
                )
                break

            chain.append(referrer)
            current = referrer

        logger.debug(
            "Upline chain retrieved",
            extra={
                "user_id": start.id,
                "max_levels": max_levels,
                "chain_length": len(chain),
            },
        )

        return chain

    async def get_upline_chain_for_user(
        self, user_id: int, max_levels: int
    ) -> list[UplineMember]:
        """
        Get the ancestors of a user by ID.

        Args:
            user_id: User ID
            max_levels: Maximum number of ancestors

        Returns:
            Ancestors nearest first; empty if the user does not exist
        """
        start = await self.user_repo.get_upline_member(user_id)
        if start is None:
            return []
        return await self.get_upline_chain(start, max_levels)
