"""
User registration functionality.

Handles referral code assignment and referral attribution of new users.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from mlm_engine.config.settings import settings
from mlm_engine.models.user import User
from mlm_engine.repositories.user_repository import UserRepository
from mlm_engine.services.user.referral_codes import find_free_referral_code
from mlm_engine.utils.datetime_utils import utc_now
from mlm_engine.utils.exceptions import (
    ReferralAttributionError,
    UserNotFoundError,
)


class UserRegistrationMixin:
    """
    Mixin for user registration functionality.

    Handles new user registration with referral support.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize user registration mixin."""
        self.session = session
        self.user_repo = UserRepository(session)

    async def register_user(
        self,
        email: str,
        name: str | None = None,
        avatar_url: str | None = None,
        referral_code: str | None = None,
    ) -> User:
        """
        Register new user with referral support.

        An unknown referral code is ignored; the user simply has no
        referrer. If no free referral code is found within
        REFERRAL_CODE_ATTEMPTS tries, the user is created without one.

        Args:
            email: Email address
            name: Display name
            avatar_url: Avatar image URL
            referral_code: Code captured from a ?ref= link (optional)

        Returns:
            Created user

        Raises:
            ValueError: If the email is already registered
        """
        existing = await self.user_repo.get_by_email(email)
        if existing:
            raise ValueError("User already registered")

        referrer = None
        if referral_code:
            referrer = await self.user_repo.get_by_referral_code(
                referral_code.strip()
            )
            if referrer is None:
                logger.info(
                    "Unknown referral code at registration",
                    extra={"referral_code": referral_code},
                )

        own_code = await find_free_referral_code(
            self.user_repo,
            settings.referral_code_prefix,
            settings.referral_code_attempts,
        )
        if own_code is None:
            logger.warning(
                "No free referral code found",
                extra={
                    "email": email,
                    "attempts": settings.referral_code_attempts,
                },
            )

        user = await self.user_repo.create(
            email=email.strip().lower(),
            name=name,
            avatar_url=avatar_url,
            referral_code=own_code,
            referred_by_id=referrer.id if referrer else None,
            referred_at=utc_now() if referrer else None,
        )

        await self.session.commit()

        logger.info(
            "User registered",
            extra={
                "user_id": user.id,
                "has_referrer": referrer is not None,
                "referral_code": own_code,
            },
        )

        return user

    async def ensure_referral_code(self, user_id: int) -> str | None:
        """
        Give an existing user a referral code if they have none.

        Args:
            user_id: User ID

        Returns:
            The user's referral code, or None if every attempt collided

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        if user.referral_code:
            return user.referral_code

        code = await find_free_referral_code(
            self.user_repo,
            settings.referral_code_prefix,
            settings.referral_code_attempts,
        )
        if code is None:
            return None

        await self.user_repo.update(user_id, referral_code=code)
        await self.session.commit()
        return code

    async def attach_referrer(self, user_id: int, referral_code: str) -> User:
        """
        Attribute an existing user to the owner of a referral code.

        Attribution happens once; it is never changed afterwards.

        Args:
            user_id: User being attributed
            referral_code: Referrer's code

        Returns:
            Updated user

        Raises:
            UserNotFoundError: If the user does not exist
            ReferralAttributionError: If the user already has a referrer,
                the code is unknown, or the code is the user's own
        """
        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        if user.is_referred:
            raise ReferralAttributionError("User already has a referrer")

        referrer = await self.user_repo.get_by_referral_code(
            referral_code.strip()
        )
        if referrer is None:
            raise ReferralAttributionError("Referral code not found")
        if referrer.id == user.id:
            raise ReferralAttributionError("Users cannot refer themselves")

        updated = await self.user_repo.update(
            user_id, referred_by_id=referrer.id, referred_at=utc_now()
        )
        await self.session.commit()

        logger.info(
            "Referrer attached",
            extra={"user_id": user_id, "referrer_id": referrer.id},
        )

        return updated
