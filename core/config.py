from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(RuntimeError):
    pass


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env",),
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = "Cricket Match Result Fix"
    log_level: str = "INFO"

    database_url: str = Field(default="", validation_alias=AliasChoices("DATABASE_URL", "MONGODB_URI", "database_url"))
    # Used only when the connection string does not name a database.
    database_name: str = "cricket"
    match_collection: str = "cricket_matches"
    store_timeout_ms: int = Field(default=10000, gt=0)

    def require_database_url(self) -> str:
        url = (self.database_url or "").strip()
        if not url:
            raise ConfigError("DATABASE_URL (or MONGODB_URI) is not set.")
        return url


settings = Settings()
