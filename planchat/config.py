"""planchat configuration: loaded from environment / .env file."""

from datetime import timedelta
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="PLANCHAT_", extra="ignore")

    env: str = "development"
    log_level: str = "INFO"

    # External agent API (relay side)
    external_api_base_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("EXTERNAL_API_BASE_URL", "PLANCHAT_EXTERNAL_API_BASE_URL"),
    )
    app_name: str = "planning_agent"
    assistant_author: str = "kaosai_planning_agent"
    upstream_timeout: float = 60.0  # seconds, applies to every upstream call
    session_init_timeout: float = 5.0  # background session registration

    # Client side
    relay_url: str = "http://localhost:8000"
    user_id: str = "u_123"  # single pseudo user, no end-user auth
    session_cookie_name: str = "planchat_session_id"
    session_max_age_days: int = 7
    cookie_file: Path = Path(".planchat/cookies.txt")

    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8501"]

    @property
    def upstream_base_url(self) -> str | None:
        if not self.external_api_base_url:
            return None
        return self.external_api_base_url.rstrip("/")

    @property
    def session_max_age(self) -> timedelta:
        return timedelta(days=self.session_max_age_days)


settings = Settings()
