from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_name: str = "Chicago Community Compass API"
    env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    mongo_uri: str = Field("mongodb://localhost:27017", alias="MONGO_URI")
    mongo_db: str = Field("compass", alias="MONGO_DB")

    jwt_secret: str = Field("change-me", alias="JWT_SECRET")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    token_expire_days: int = Field(7, alias="TOKEN_EXPIRE_DAYS")

    frontend_url: str = Field("http://localhost:5173", alias="FRONTEND_URL")

    open_data_base_url: str = Field(
        "https://data.cityofchicago.org/resource", alias="OPEN_DATA_BASE_URL"
    )
    open_data_timeout_seconds: float = Field(10.0, alias="OPEN_DATA_TIMEOUT_SECONDS")
    open_data_app_token: str | None = Field(None, alias="OPEN_DATA_APP_TOKEN")

    admin_email: str = Field("admin@compass.chicago", alias="ADMIN_EMAIL")
    admin_password: str = Field("admin123", alias="ADMIN_PASSWORD")

    @property
    def is_development(self) -> bool:
        return self.env.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    return Settings()
