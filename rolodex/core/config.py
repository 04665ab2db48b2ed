"""
Configuration module with strict validation.

Key principles:
- APP STARTUP requires DATABASE_URL and nothing else
- Duplicate-detection thresholds are configurable but default to the
  values the review UI was tuned against
- Safe defaults for all optional settings
"""
from typing import Optional
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with validation.

    Loads from environment variables and .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database (REQUIRED for API startup)
    database_url: str = Field(
        ...,
        description="SQLAlchemy connection URL (PostgreSQL or SQLite)"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # Duplicate detection
    similar_name_threshold: float = Field(
        default=0.8,
        gt=0.0,
        le=1.0,
        description="Name similarity above which a pair is reported as 'Similar names'"
    )

    same_company_name_threshold: float = Field(
        default=0.6,
        gt=0.0,
        le=1.0,
        description="Name similarity above which contacts at the same company are reported"
    )

    normalized_name_score: float = Field(
        default=0.95,
        gt=0.0,
        le=1.0,
        description="Confidence floor for pairs whose canonical name tokens match"
    )

    duplicate_scan_warn_threshold: int = Field(
        default=2000,
        ge=2,
        description="Contact count above which the O(n^2) duplicate scan logs a warning"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper

    @model_validator(mode="after")
    def validate_thresholds(self) -> "Settings":
        """The same-company rule must be looser than the plain similarity rule."""
        if self.same_company_name_threshold > self.similar_name_threshold:
            raise ValueError(
                "same_company_name_threshold must not exceed similar_name_threshold"
            )
        return self

    @property
    def is_sqlite(self) -> bool:
        """True when the configured database is SQLite."""
        return self.database_url.startswith("sqlite")


# Global settings instance
# This can be imported throughout the application
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get or create the global settings instance.

    This pattern allows:
    - Easy testing (can reset settings between tests)
    - Lazy loading (only loads when first accessed)
    - Singleton pattern (same instance used everywhere)
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """
    Reset the global settings instance.

    Useful for testing to ensure clean state between tests.
    """
    global _settings
    _settings = None
