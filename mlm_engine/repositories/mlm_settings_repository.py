"""
MLM settings repository.

Data access layer for the singleton MLMSettings row.
"""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from mlm_engine.models.mlm_settings import MLM_SETTINGS_ID, MLMSettings
from mlm_engine.repositories.base import BaseRepository


class MLMSettingsRepository(BaseRepository[MLMSettings]):
    """MLM settings repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize MLM settings repository."""
        super().__init__(MLMSettings, session)

    async def get_current(self) -> MLMSettings | None:
        """
        Get the stored settings row.

        Returns:
            Settings or None if nothing has been saved yet
        """
        return await self.get_by_id(MLM_SETTINGS_ID)

    async def upsert(self, **data: Any) -> MLMSettings:
        """
        Create the settings row or update the given fields.

        Args:
            **data: Column values to write

        Returns:
            Stored settings
        """
        current = await self.get_current()
        if current is None:
            return await self.create(id=MLM_SETTINGS_ID, **data)

        for key, value in data.items():
            setattr(current, key, value)

        await self.session.flush()
        await self.session.refresh(current)
        return current
