from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="Address Verifier API", alias="APP_NAME")
    app_env: str = Field(default="local", alias="APP_ENV")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    nominatim_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        alias="NOMINATIM_URL",
    )
    nominatim_user_agent: str = Field(
        default="address-verifier/1.0 (contact@example.com)",
        alias="NOMINATIM_USER_AGENT",
    )
    nominatim_interval_ms: int = Field(default=1200, alias="NOMINATIM_INTERVAL_MS")

    opencage_url: str = Field(
        default="https://api.opencagedata.com/geocode/v1/json",
        alias="OPENCAGE_URL",
    )
    opencage_api_key: str | None = Field(default=None, alias="OPENCAGE_API_KEY")

    geocoder_timeout_s: float = Field(default=10.0, alias="GEOCODER_TIMEOUT_S")
    default_country: str | None = Field(default=None, alias="DEFAULT_COUNTRY")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
