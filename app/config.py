"""
Application settings loaded from environment variables and an optional .env file.
"""

from pathlib import Path
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

FALLBACK_JWT_SECRET = "fallback_secret"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    APP_NAME: str = "Recipe Gateway"
    VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Flat-file persistence
    DATA_DIR: Path = Path("data")

    # Auth
    JWT_SECRET: str = FALLBACK_JWT_SECRET
    JWT_EXPIRES_HOURS: int = 2

    # Cache (empty REDIS_URL keeps the in-process cache)
    REDIS_URL: str = ""
    CACHE_TTL_SECONDS: int = 3600
    MERGED_CACHE_TTL_SECONDS: int = 300

    # Upstream providers
    UPSTREAM_TIMEOUT: float = 10.0
    MEALDB_BASE_URL: str = "https://www.themealdb.com/api/json/v1/1"
    DUMMYJSON_BASE_URL: str = "https://dummyjson.com"
    COCKTAILDB_BASE_URL: str = "https://www.thecocktaildb.com/api/json/v1/1"
    DUMMYJSON_LIST_LIMIT: int = 20

    DEFAULT_RECIPE_IMAGE: str = (
        "https://images.unsplash.com/photo-1495521821757-a1efb6729352"
        "?q=80&w=800&auto=format&fit=crop"
    )
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["*"])

    @property
    def recipes_file(self) -> Path:
        return self.DATA_DIR / "recipes.json"

    @property
    def users_file(self) -> Path:
        return self.DATA_DIR / "users.json"


settings = Settings()
