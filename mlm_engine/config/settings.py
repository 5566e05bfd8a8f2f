"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str | None = Field(
        default=None,
        description="Optional log file path (rotated daily)"
    )

    # Referral codes
    referral_code_prefix: str = Field(
        default="TN",
        min_length=1,
        max_length=8,
        description="Prefix for generated referral codes"
    )
    referral_code_attempts: int = Field(
        default=5, ge=1, le=50,
        description="Collision retries before a user is left without a code"
    )

    # Referral tree reporting bounds
    tree_default_depth: int = Field(default=3, ge=0)
    tree_max_depth: int = Field(
        default=6, ge=0, le=12,
        description="Hard cap on referral tree depth"
    )
    tree_default_children: int = Field(default=20, ge=1)
    tree_max_children: int = Field(
        default=100, ge=1, le=1000,
        description="Hard cap on children expanded per tree node"
    )

    # Earner summary
    recent_commissions_limit: int = Field(default=5, ge=1, le=100)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith((
            'postgresql://', 'postgresql+asyncpg://', 'sqlite+aiosqlite://'
        )):
            raise ValueError(
                'DATABASE_URL must start with postgresql://, '
                'postgresql+asyncpg:// or sqlite+aiosqlite://'
            )
        return v

    @field_validator('referral_code_prefix')
    @classmethod
    def validate_referral_code_prefix(cls, v: str) -> str:
        """Referral code prefixes are upper-case alphanumerics."""
        if not v.isalnum():
            raise ValueError('REFERRAL_CODE_PREFIX must be alphanumeric')
        return v.upper()

    @model_validator(mode='after')
    def validate_tree_bounds(self) -> 'Settings':
        """Clamp tree defaults into their hard caps."""
        if self.tree_default_depth > self.tree_max_depth:
            logger.warning(
                f"TREE_DEFAULT_DEPTH ({self.tree_default_depth}) exceeds "
                f"TREE_MAX_DEPTH ({self.tree_max_depth}), clamping"
            )
            self.tree_default_depth = self.tree_max_depth
        if self.tree_default_children > self.tree_max_children:
            logger.warning(
                f"TREE_DEFAULT_CHILDREN ({self.tree_default_children}) exceeds "
                f"TREE_MAX_CHILDREN ({self.tree_max_children}), clamping"
            )
            self.tree_default_children = self.tree_max_children
        return self

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Validate production-specific requirements."""
        if self.environment == 'production':
            if self.debug:
                raise ValueError(
                    'DEBUG must be False in production environment. '
                    'Set DEBUG=false in your .env file.'
                )
            if self.database_url.startswith('sqlite'):
                logger.warning(
                    'DATABASE_URL points to SQLite in production. '
                    'Concurrent order finalization needs PostgreSQL.'
                )
        return self

    @property
    def async_database_url(self) -> str:
        """Database URL with an async driver."""
        if self.database_url.startswith('postgresql://'):
            return self.database_url.replace(
                'postgresql://', 'postgresql+asyncpg://', 1
            )
        return self.database_url


# Global settings instance
settings = Settings()
