"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode (exposes /docs). Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        api_base: Path prefix of the spreadsheet endpoints.
        cors_origins: Origins allowed to call the API from a browser.
        database_url: SQLAlchemy URL for the cell store. When unset,
            spreadsheets live in memory only.
        host: Bind address for the development server.
        port: Bind port for the development server.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    project_name: str = "GridSync"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    api_base: str = "/api"
    cors_origins: list[str] = ["*"]

    database_url: Optional[str] = None

    host: str = "127.0.0.1"
    port: int = 2345


settings = Settings()
