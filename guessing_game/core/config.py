from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_env: str = Field(default="dev", alias="APP_ENV")
    app_host: str = Field(default="0.0.0.0", alias="APP_HOST")
    app_port: int = Field(default=8000, alias="APP_PORT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    content_api_base_url: str = Field(
        default="http://localhost:8080/api",
        alias="CONTENT_API_BASE_URL",
    )
    content_api_timeout_seconds: float = Field(default=10.0, alias="CONTENT_API_TIMEOUT_SECONDS")

    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    saved_game_ttl_seconds: int = Field(default=7 * 24 * 3600, alias="SAVED_GAME_TTL_SECONDS")

    game_random_seed: int | None = Field(default=None, alias="GAME_RANDOM_SEED")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
