"""
User service module.

Provides the referral related parts of user management.

Structure:
- referral_codes.py: Referral code generation with collision retries
- registration.py: User registration with referral attribution

Usage:
    from mlm_engine.services.user import UserService

    user_service = UserService(session)
    user = await user_service.register_user(email, name, referral_code="TN0A9ZQX")
"""

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_engine.services.user.registration import UserRegistrationMixin


class UserService(UserRegistrationMixin):
    """Combined user service."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize user service with all mixins.

        Args:
            session: Database session
        """
        UserRegistrationMixin.__init__(self, session)


__all__ = ["UserService"]
