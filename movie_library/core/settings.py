from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    debug: bool = False
    app_name: str = "Movie Library API"
    api_prefix: str = "/api"
    database_url: str = "sqlite:///./movie_library.db"
    seed_reference_data: bool = True

    # No default: the service refuses to start without a signing key.
    jwt_secret_key: str = Field(min_length=32)
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "movie-library"
    jwt_audience: str = "movie-library-clients"
    access_token_expire_minutes: int = Field(default=15, gt=0)
    refresh_token_expire_days: int = Field(default=7, gt=0)
    refresh_reuse_revokes_chain: bool = False

    refresh_cookie_name: str = "refresh_token"
    refresh_cookie_secure: bool = True

    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])

    auth_rate_limit_window_seconds: int = 60
    auth_rate_limit_max_requests: int = 12

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, list):
            return value
        if isinstance(value, str):
            return [item.strip() for item in value.split(",") if item.strip()]
        return []

    @field_validator("jwt_algorithm")
    @classmethod
    def require_symmetric_algorithm(cls, value: str) -> str:
        if value not in {"HS256", "HS384", "HS512"}:
            raise ValueError("jwt_algorithm must be an HMAC algorithm (HS256, HS384 or HS512)")
        return value

    @property
    def refresh_cookie_path(self) -> str:
        return f"{self.api_prefix}/auth"


@lru_cache
def get_settings() -> Settings:
    return Settings()
