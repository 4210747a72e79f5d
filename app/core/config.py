from functools import lru_cache
from typing import Literal
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["development", "production"]

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "CatalogAPI"
    DEBUG: bool # ✅ declared
    GIT_SHA: str = "unknown"

    # Mongo
    MONGO_URI: str # ✅ declared
    MONGO_DB: str # ✅ declared

    # Redis (optional: visit ledger + facet cache)
    REDIS_URL: str = ""

    # Auth (tokens are issued elsewhere, we only verify them)
    JWT_SECRET: str # ✅ declared
    JWT_ALGORITHM: str = "HS256"

    # Session cookie
    SESSION_SECRET: str # ✅ declared
    session_cookie: str = "catalog_session"
    session_max_age: int = 24 * 3600          # 24 hours, also TTL of the redis visit ledger

    # Cache config
    facets_cache_ttl: int = 60                  # seconds
    visits_key_prefix: str = "visits"           # redis key namespace

    # API
    api_prefix: str = "/api"

    # pydantic-settings config will be set dynamically in the factory below
    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
