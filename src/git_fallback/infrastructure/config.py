"""Application configuration: loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from git_fallback.domain.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Central configuration loaded from env vars (or ``.env`` file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    auth_token: SecretStr | None = None
    github_host: str = "github.com"
    github_api_url: str = "https://api.github.com"
    rate_limit_margin_seconds: float = 30.0
    log_max_commits: int = 100
    numstat_max_depth: int = 100
    http_timeout_seconds: float = 30.0
    use_native_git: bool = True
    git_binary: str = "git"
    cleanup_ref: str = "HEAD"
    log_level: str = "WARNING"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton application settings (cached after first call).

    Malformed values surface as :class:`ConfigurationError` naming the variables.
    """
    try:
        return Settings()
    except ValidationError as exc:
        names = sorted({str(err["loc"][0]).upper() for err in exc.errors() if err["loc"]})
        raise ConfigurationError(f"invalid configuration: {', '.join(names)}") from exc
