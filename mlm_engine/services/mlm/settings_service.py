"""
Commission settings service.

Reads and writes the singleton program settings. When nothing has been
saved, the injected default applies; the default is never written back.
"""

from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_engine.models.mlm_settings import MLMSettings
from mlm_engine.repositories.mlm_settings_repository import (
    MLMSettingsRepository,
)
from mlm_engine.services.base_service import BaseService, transaction
from mlm_engine.services.mlm.config import DEFAULT_COMMISSION_SETTINGS
from mlm_engine.services.mlm.types import CommissionSettings, LevelRate
from mlm_engine.utils.money import round_percent, to_decimal
from mlm_engine.validators.mlm_settings import (
    LevelInput,
    MLMSettingsUpdate,
    validate_settings_payload,
)


def normalize_levels(levels: Iterable[LevelInput]) -> tuple[LevelRate, ...]:
    """
    Normalize submitted level entries.

    A missing level becomes its 1-based position, a missing percent
    becomes 0. Percents are rounded to four places. Entries with
    level <= 0 or a negative percent are dropped.

    Args:
        levels: Submitted entries in order

    Returns:
        Levels to persist, in submitted order
    """
    normalized = []
    for position, entry in enumerate(levels, start=1):
        level = entry.level if entry.level is not None else position
        percent = entry.percent if entry.percent is not None else Decimal("0")
        percent = round_percent(percent)
        if level <= 0 or percent < 0:
            continue
        normalized.append(LevelRate(level=level, percent=percent))
    return tuple(normalized)


def levels_from_json(raw: Sequence[Mapping[str, Any]] | None) -> tuple[LevelRate, ...]:
    """Decode levels stored on the settings row."""
    return tuple(
        LevelRate(level=int(item["level"]), percent=to_decimal(item["percent"]))
        for item in raw or ()
    )


def levels_to_json(levels: Iterable[LevelRate]) -> list[dict[str, Any]]:
    """Encode levels for the JSON column (percent as decimal string)."""
    return [level.to_dict() for level in levels]


def settings_from_row(row: MLMSettings) -> CommissionSettings:
    """Build a settings snapshot from the stored row."""
    return CommissionSettings(
        is_enabled=row.is_enabled,
        levels=levels_from_json(row.levels),
        min_order_amount=to_decimal(row.min_order_amount),
        prevent_self_referral=row.prevent_self_referral,
        one_commission_per_order=row.one_commission_per_order,
    )


class CommissionSettingsService(BaseService):
    """Loads and saves commission program settings."""

    def __init__(
        self,
        session: AsyncSession,
        default: CommissionSettings = DEFAULT_COMMISSION_SETTINGS,
    ) -> None:
        """
        Initialize settings service.

        Args:
            session: Async database session
            default: Settings used while nothing is stored
        """
        super().__init__(session)
        self.default = default
        self.settings_repo = MLMSettingsRepository(session)

    async def get_stored(self) -> CommissionSettings | None:
        """
        Get the saved settings, without falling back to the default.

        Returns:
            Settings or None if nothing has been saved yet
        """
        row = await self.settings_repo.get_current()
        if row is None:
            return None
        return settings_from_row(row)

    async def load(self) -> CommissionSettings:
        """
        Get the effective settings.

        Returns:
            Saved settings, or the default when none are stored
        """
        stored = await self.get_stored()
        if stored is None:
            self.logger.debug("No MLM settings stored, using defaults")
            return self.default
        return stored

    @transaction
    async def save(
        self, payload: Mapping[str, Any] | MLMSettingsUpdate
    ) -> CommissionSettings:
        """
        Save a partial settings update.

        Only submitted fields change. On first save, fields that were not
        submitted take the default values.

        Args:
            payload: Raw payload or an already validated update

        Returns:
            Settings as stored

        Raises:
            SettingsValidationError: If the payload is malformed
        """
        if isinstance(payload, MLMSettingsUpdate):
            update = payload
        else:
            update = validate_settings_payload(payload)

        data = update.model_dump(exclude_unset=True, exclude_none=True)
        if update.levels is not None:
            data["levels"] = levels_to_json(normalize_levels(update.levels))

        if await self.settings_repo.get_current() is None:
            data = {**self._default_columns(), **data}

        row = await self.settings_repo.upsert(**data)

        self.logger.info(
            "MLM settings saved",
            extra={
                "fields": sorted(data.keys()),
                "levels": row.levels,
                "is_enabled": row.is_enabled,
            },
        )

        return settings_from_row(row)

    def _default_columns(self) -> dict[str, Any]:
        """Column values of the injected default."""
        return {
            "is_enabled": self.default.is_enabled,
            "levels": levels_to_json(self.default.levels),
            "min_order_amount": self.default.min_order_amount,
            "prevent_self_referral": self.default.prevent_self_referral,
            "one_commission_per_order": self.default.one_commission_per_order,
        }
