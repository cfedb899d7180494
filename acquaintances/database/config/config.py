"""
Configuration — Pydantic v2 Settings (env / .env)
=================================================

Purpose
-------
Centralized, strongly-typed configuration for the verification store using:
- Pydantic v2 `BaseSettings` for environment-driven values
- `pydantic-settings` v2 for `.env` loading and model config

Load Order & Behavior
---------------------
- Values are read from the environment; if not present, `.env` is used.
- Every field has a default, so importing this module never fails on a bare host.
- `extra="ignore"`: unknown env vars are ignored (not an error).
- `VERIFICATION_GROUPS` may be given as JSON in the environment, e.g.
  ``VERIFICATION_GROUPS='{"phone": 1, "personally": 3}'``.

Usage
-----
from acquaintances.database.config.config import Settings, settings

# Module-level singleton (table names, default engine)
table = settings.VERIFICATIONS_TABLE

# Explicit instance handed to the store / query engine
custom = Settings(VERIFICATION_GROUPS={"phone": 1}, VERIFICATION_MAX_LENGTH=140)
custom.group_id("phone")   # -> 1
custom.group_id("email")   # -> None
"""

from typing import Dict, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_VERIFICATION_GROUPS: Dict[str, int] = {
    "text": 0,
    "phone": 1,
    "cam": 2,
    "personally": 3,
    "intimately": 4,
}
"""Group name → group id mapping used when nothing is configured."""


class Settings(BaseSettings):
    """
    Verification store configuration loaded from environment variables
    or a `.env` file. Provides strongly typed access to environment values.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    DATABASE_URL: str = Field(
        default="sqlite:///acquaintances.db",
        description="SQLAlchemy URL of the database holding the verification tables.",
    )
    VERIFICATIONS_TABLE: str = Field(
        default="verifications", description="Name of the verifications table."
    )
    VERIFICATION_GROUPS_TABLE: str = Field(
        default="verification_groups", description="Name of the verification groups table."
    )
    VERIFICATION_MAX_LENGTH: int = Field(
        default=255, description="Maximum length (characters) of a verification message."
    )
    VERIFICATION_GROUPS: Dict[str, int] = Field(
        default_factory=lambda: dict(DEFAULT_VERIFICATION_GROUPS),
        description="Ordered mapping of group names to integer group ids.",
    )

    @field_validator("VERIFICATION_MAX_LENGTH")
    @classmethod
    def check_max_length(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("VERIFICATION_MAX_LENGTH must be a positive integer")
        return value

    @field_validator("VERIFICATION_GROUPS")
    @classmethod
    def check_unique_group_ids(cls, value: Dict[str, int]) -> Dict[str, int]:
        ids = list(value.values())
        if len(ids) != len(set(ids)):
            raise ValueError("VERIFICATION_GROUPS must map every name to a distinct id")
        return value

    def group_id(self, group_name: Optional[str]) -> Optional[int]:
        """Resolve a group name to its configured id, or None if unknown."""
        if group_name is None:
            return None
        return self.VERIFICATION_GROUPS.get(group_name)

    def group_name(self, group_id: int) -> Optional[str]:
        """Reverse lookup of `group_id`."""
        for name, configured_id in self.VERIFICATION_GROUPS.items():
            if configured_id == group_id:
                return name
        return None


settings = Settings()
"""Defines a Settings object that contains the contents of the environment / .env file"""
