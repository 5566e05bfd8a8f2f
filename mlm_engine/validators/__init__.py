"""
Validators package.

Provides validation of admin payloads.
"""

from mlm_engine.validators.mlm_settings import (
    MAX_LEVEL_PERCENT,
    LevelInput,
    MLMSettingsUpdate,
    validate_settings_payload,
)


__all__ = [
    "MAX_LEVEL_PERCENT",
    "LevelInput",
    "MLMSettingsUpdate",
    "validate_settings_payload",
]
