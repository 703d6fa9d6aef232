from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Tasky"
    debug: bool = False
    database_url: str = Field("sqlite:///./tasky_v2.db", validation_alias="DATABASE_URL")
    jwt_secret_key: str = Field("dev-only-secret-key-change-me-before-deploying", validation_alias="JWT_SECRET_KEY")
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "tasky"
    jwt_audience: str = "tasky"
    jwt_expire_minutes: int = 120
    cors_allowed_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:5174",
        "http://localhost:3000",
    ]
    cors_allowed_origin_regex: str = r"https://.*\.vercel\.app"
    schedule_default_capacity: int = 5
    schedule_default_span_days: int = 7


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
