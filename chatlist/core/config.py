from __future__ import annotations

from functools import lru_cache
from urllib.parse import quote_plus

from pydantic import Field, PostgresDsn, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _build_postgres_dsn(
    *,
    host: str,
    port: int,
    name: str,
    user: str,
    password: str,
    ssl_mode: str,
) -> str:
    encoded_user = quote_plus(user)
    encoded_password = quote_plus(password) if password else ""
    auth = f"{encoded_user}:{encoded_password}" if encoded_password else encoded_user
    dsn = f"postgresql://{auth}@{host}:{port}/{name}"
    if ssl_mode:
        dsn = f"{dsn}?sslmode={quote_plus(ssl_mode)}"
    return dsn


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    environment: str = Field(default="development", validation_alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    db_host: str = Field(default="localhost", validation_alias="DB_HOST")
    db_port: int = Field(default=5432, validation_alias="DB_PORT")
    db_name: str = Field(default="chatlist_dev", validation_alias="DB_NAME")
    db_user: str = Field(default="chatlist", validation_alias="DB_USER")
    db_password: str = Field(default="chatlist", validation_alias="DB_PASSWORD")
    db_ssl_mode: str = Field(default="prefer", validation_alias="DB_SSL_MODE")

    database_url: PostgresDsn | None = Field(default=None, validation_alias="DATABASE_URL")

    frontend_origins: str = Field(
        default="http://localhost:8081,http://localhost:19006",
        validation_alias="FRONTEND_ORIGINS",
    )

    conversations_default_limit: int = Field(
        default=30,
        ge=1,
        le=100,
        validation_alias="CONVERSATIONS_DEFAULT_LIMIT",
    )

    chat_api_base_url: str = Field(default="http://localhost:8000", validation_alias="CHAT_API_BASE_URL")
    chat_api_timeout_seconds: float = Field(default=10.0, gt=0, validation_alias="CHAT_API_TIMEOUT_SECONDS")
    default_avatar_url: str = Field(default="asset://Logo.png", validation_alias="DEFAULT_AVATAR_URL")
    timestamp_display_format: str = Field(default="%H:%M:%S", validation_alias="TIMESTAMP_DISPLAY_FORMAT")

    @computed_field
    @property
    def database_dsn(self) -> str:
        if self.database_url is not None:
            return str(self.database_url)
        return _build_postgres_dsn(
            host=self.db_host,
            port=self.db_port,
            name=self.db_name,
            user=self.db_user,
            password=self.db_password,
            ssl_mode=self.db_ssl_mode,
        )

    @property
    def frontend_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.frontend_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
