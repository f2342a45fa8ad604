"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Service configuration. All values come from environment variables."""

    # Runtime
    service: str = Field(default="memory")
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("environment", "node_env"),
    )

    # HTTP
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    max_body_bytes: int = Field(default=1024 * 1024)
    cors_allow_origin: str = Field(default="*")

    # Database — DATABASE_URL overrides the local database_path when set
    database_url: str = Field(default="")
    database_auth_token: str = Field(default="")
    database_path: Path = Field(default=Path("data/memory.db"))

    # Memory service
    memory_list_limit: int = Field(default=200)

    # Message log
    messages_file: Path = Field(default=Path("data/messages.json"))

    # Demo server
    demo_shutdown_seconds: float = Field(default=3.0)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"


settings = Settings()
