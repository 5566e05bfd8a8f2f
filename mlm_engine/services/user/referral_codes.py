"""
Referral code generation.

Codes look like ``TN0A9ZQX``: a prefix plus six base-36 characters.
"""

import secrets

from mlm_engine.repositories.user_repository import UserRepository

ALPHABET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
SUFFIX_LENGTH = 6


def to_base36(value: int, width: int = SUFFIX_LENGTH) -> str:
    """
    Encode a non-negative integer in upper-case base 36, zero padded.

    Args:
        value: Number to encode
        width: Minimum length

    Returns:
        Encoded string
    """
    if value < 0:
        raise ValueError("value must be non-negative")
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(ALPHABET[remainder])
    return "".join(reversed(digits)).rjust(width, "0")


def generate_referral_code(prefix: str) -> str:
    """
    Generate a random referral code.

    Args:
        prefix: Code prefix (e.g. "TN")

    Returns:
        prefix + 6 base-36 characters
    """
    return f"{prefix}{to_base36(secrets.randbelow(36 ** SUFFIX_LENGTH))}"


async def find_free_referral_code(
    user_repo: UserRepository, prefix: str, attempts: int
) -> str | None:
    """
    Generate a referral code nobody uses yet.

    Args:
        user_repo: User repository for collision checks
        prefix: Code prefix
        attempts: Max codes to try

    Returns:
        Free code, or None if every attempt collided
    """
    for _ in range(attempts):
        code = generate_referral_code(prefix)
        if not await user_repo.referral_code_exists(code):
            return code
    return None
