"""Application configuration"""
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import List


DEFAULT_ALLOWED_FILE_TYPES = (
    "image/jpeg,image/jpg,image/png,image/gif,image/svg+xml,image/webp"
)


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017/chatbot"
    mongodb_db: str = "chatbot"  # Used when the URI does not name a database
    db_server_selection_timeout_ms: int = 10000
    db_socket_timeout_ms: int = 10000
    db_connect_wait_seconds: float = 1.0

    # Uploads
    upload_dir: str = "uploads"
    max_file_size: int = 5 * 1024 * 1024
    allowed_file_types: str = DEFAULT_ALLOWED_FILE_TYPES

    # Application
    port: int = 5000
    debug: bool = False
    # Comma-separated; empty reflects every origin
    cors_origins: str = ""
    # Vercel sets VERCEL=1 for serverless invocations
    serverless: bool = Field(False, validation_alias=AliasChoices("serverless", "vercel"))

    @property
    def allowed_file_type_list(self) -> List[str]:
        return _split_csv(self.allowed_file_types)

    @property
    def cors_origin_list(self) -> List[str]:
        return _split_csv(self.cors_origins)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
