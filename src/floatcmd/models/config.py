from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from floatcmd.api.errors import ConfigError

DEFAULT_BASE_URL = "https://geoweb.princeton.edu/people/simons/SOM/"


class AppSettings(BaseSettings):
    """Application-wide settings populated from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="FLOAT_",
        extra="ignore",
    )

    base_url: str | None = DEFAULT_BASE_URL
    file_suffix: str = "_all"
    device_pattern: str | None = None
    device: str | None = None
    cache_dir: str = "~/.cache/floatcmd"
    cache_file: str = "telemetry.db"
    freshness_hours: float = 24.0
    timeout: float = 30.0

    @property
    def cache_path(self) -> Path:
        """Full path to the SQLite cache database."""
        return Path(self.cache_dir).expanduser() / self.cache_file

    def device_url(self, device_name: str) -> str:
        """Return ``{base_url}{device}{suffix}.txt`` for *device_name*."""
        return f"{self.require_base_url()}{device_name}{self.file_suffix}.txt"

    def require_base_url(self) -> str:
        """Return the configured base URL with a trailing slash.

        Raises :class:`~floatcmd.api.errors.ConfigError` when it is unset.
        """
        if not self.base_url:
            raise ConfigError("No data base URL configured. Set FLOAT_BASE_URL.")
        base = self.base_url
        return base if base.endswith("/") else f"{base}/"
