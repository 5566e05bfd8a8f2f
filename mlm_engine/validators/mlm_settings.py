"""
MLM settings payload validation.

Admin payloads arrive camelCase (``minOrderAmount``) or snake_case
(``min_order_amount``). Every field is optional: a save only touches the
fields that were sent.
"""

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from mlm_engine.utils.exceptions import SettingsValidationError

# Largest value a PercentType (DECIMAL(7,4)) ledger column holds
MAX_LEVEL_PERCENT = Decimal("999.9999")


class LevelInput(BaseModel):
    """One level entry as submitted; both keys may be missing."""

    model_config = ConfigDict(extra="ignore")

    level: int | None = None
    percent: Decimal | None = Field(
        default=None, le=MAX_LEVEL_PERCENT, allow_inf_nan=False
    )


class MLMSettingsUpdate(BaseModel):
    """Partial update of the commission program settings."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )

    is_enabled: bool | None = None
    levels: list[LevelInput] | None = None
    min_order_amount: Decimal | None = Field(
        default=None, ge=0, allow_inf_nan=False
    )
    prevent_self_referral: bool | None = None
    one_commission_per_order: bool | None = None


def validate_settings_payload(
    payload: Mapping[str, Any],
) -> MLMSettingsUpdate:
    """
    Validate a settings payload.

    Args:
        payload: Raw payload (camelCase or snake_case keys)

    Returns:
        Parsed update with only the submitted fields set

    Raises:
        SettingsValidationError: If a field is malformed; ``field`` names
            the first offending location (e.g. ``levels.1.percent``)
    """
    if not isinstance(payload, Mapping):
        raise SettingsValidationError(
            "payload", "Settings payload must be an object"
        )

    try:
        return MLMSettingsUpdate.model_validate(dict(payload))
    except PydanticValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "payload"
        raise SettingsValidationError(field, error["msg"]) from exc
