"""Configuration management for the mail/news sync backend."""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigError

# Load .env early so BaseSettings can pick values up seamlessly.
load_dotenv()

GRAPH_CREDENTIALS = ("client_id", "client_secret", "tenant_id")


class Settings(BaseSettings):
    """App configuration derived from environment variables.

    Nothing is mandatory at start-up: operations call :meth:`require` for the
    values they need, so a missing setting is reported per request instead of
    preventing the server from booting.
    """

    client_id: str | None = Field(None, alias="CLIENT_ID")
    client_secret: str | None = Field(None, alias="CLIENT_SECRET")
    tenant_id: str | None = Field(None, alias="TENANT_ID")
    target_user_email: str | None = Field(None, alias="TARGET_USER_EMAIL")
    graph_page_size: int = Field(50, alias="GRAPH_PAGE_SIZE")

    news_api_key: str | None = Field(None, alias="NEWS_API_KEY")
    news_api_base_url: str = Field("https://newsapi.org/v2", alias="NEWS_API_BASE_URL")
    default_language: str = Field("ro", alias="DEFAULT_LANGUAGE")

    retention_days: int = Field(60, alias="RETENTION_DAYS")
    http_timeout: float = Field(30.0, alias="HTTP_TIMEOUT")
    database_path: Path = Field(Path("data/documents.db"), alias="DATABASE_PATH")

    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(8080, alias="PORT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator(
        "client_id",
        "client_secret",
        "tenant_id",
        "target_user_email",
        "news_api_key",
        mode="before",
    )
    @classmethod
    def _empty_str_to_none(cls, value):
        if isinstance(value, str) and value.strip() == "":
            return None
        return value

    @field_validator("news_api_base_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def authority_url(self) -> str:
        return f"https://login.microsoftonline.com/{self.tenant_id}"

    def missing(self, *names: str) -> list[str]:
        """Environment variable names of the given fields that are unset."""
        fields = type(self).model_fields
        return [fields[name].alias or name.upper() for name in names if not getattr(self, name)]

    def require(self, *names: str) -> None:
        """Raise ConfigError naming every unset variable among ``names``."""
        missing = self.missing(*names)
        if missing:
            raise ConfigError(f"Missing required setting(s): {', '.join(missing)}")
