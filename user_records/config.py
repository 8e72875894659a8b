"""
Configuration settings for the user records manager.

Uses Pydantic Settings to load environment variables for the PostgreSQL
connection, the connection pool, logging, and the result cap applied when
listing users.
"""
from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("userdb", alias="DB_NAME")
    db_maintenance_name: str = Field("postgres", alias="DB_MAINTENANCE_NAME")
    db_pool_max_size: int = Field(5, alias="DB_POOL_MAX_SIZE", ge=1)
    db_connect_timeout: int = Field(10, alias="DB_CONNECT_TIMEOUT", ge=1)

    # Listing cap; no pagination cursor is exposed.
    find_all_limit: int = Field(100, alias="FIND_ALL_LIMIT", ge=1)

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
