"""Application configuration."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Core settings
    log_level: str = Field(default="INFO", alias="SLOWQUERY_LOG_LEVEL")

    # Analysis settings
    max_document_length: int = Field(default=200_000, alias="SLOWQUERY_MAX_DOCUMENT_LENGTH")
    sql_language_ids: str = Field(default="sql", alias="SLOWQUERY_SQL_LANGUAGE_IDS")

    # Security settings
    require_auth: bool = Field(default=False, alias="SLOWQUERY_REQUIRE_AUTH")
    api_key: Optional[str] = Field(default=None, alias="SLOWQUERY_API_KEY")
    cors_origins: str = Field(default="http://localhost:5173", alias="SLOWQUERY_CORS_ORIGINS")
    rate_limit: str = Field(default="120/minute", alias="SLOWQUERY_RATE_LIMIT")

    class Config:
        env_prefix = "SLOWQUERY_"
        case_sensitive = False
        env_file = ".env"

    def get_sql_language_ids(self) -> set[str]:
        """Language ids treated as SQL documents, lower-cased."""
        return {
            item.strip().lower() for item in self.sql_language_ids.split(",") if item.strip()
        }


settings = Settings()
