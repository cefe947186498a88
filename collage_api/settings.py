from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


def choose_env_file() -> str:
    return ".env.local" if Path(".env.local").exists() else ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=choose_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",  # tolerate unrelated env vars
    )

    # Cloudinary
    CLD_CLOUD_NAME: str = ""
    CLD_API_KEY: str = ""
    CLD_API_SECRET: str = ""
    CLD_DELIVERY_BASE: str = "https://res.cloudinary.com"

    # Posts
    POSTS_PREFIX: str = "collages"
    SEARCH_PAGE_SIZE: int = 100
    FETCH_CONCURRENCY: int = 8
    HTTP_TIMEOUT_SECONDS: float = 10.0

    # Admin auth
    ADMIN_JWT_SECRET: str = ""
    ADMIN_TOKEN_TTL_SECONDS: int = 12 * 60 * 60

    # HTTP
    CORS_ORIGINS: List[str] = ["*"]

    # Logging
    LOG_LEVEL: str = "INFO"

    @property
    def raw_delivery_url(self) -> str:
        base = self.CLD_DELIVERY_BASE.rstrip("/")
        return f"{base}/{self.CLD_CLOUD_NAME}/raw/upload"


# Global settings instance (evaluated at import, but reads env on construction)
settings = Settings()
