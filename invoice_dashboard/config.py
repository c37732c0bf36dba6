from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = Field(default="Invoice Dashboard")
    supabase_url: Optional[str] = Field(default=None)
    # Service role key for table access, anon key for Supabase Auth
    supabase_service_role_key: Optional[str] = Field(default=None)
    supabase_key: Optional[str] = Field(default=None)
    session_secret: Optional[str] = Field(default=None)
    session_max_age: int = Field(default=14 * 24 * 60 * 60)
    log_level: str = Field(default="INFO")
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)

    model_config = SettingsConfigDict(case_sensitive=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()
