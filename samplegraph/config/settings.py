"""Application settings loaded from environment variables via pydantic-settings.

Configuration is read from two sources, in priority order:

  1. Environment variables, e.g. ``GENIUS_KEY=abc123`` (always win)
  2. A ``.env`` file in the working directory (local development)

Field names map to upper-cased environment variables automatically
(``redis_key_expiry`` <- ``REDIS_KEY_EXPIRY``).

Three inputs have no default and must be supplied before the service
starts: the provider credential, the cache connection string and the
cache TTL.  ``load_settings`` turns their absence into a
``ConfigurationError`` so the process can exit before serving traffic.
"""

from __future__ import annotations

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from samplegraph.utils.errors import ConfigurationError

_CACHE_URL_SCHEMES = ("redis://", "rediss://", "unix://", "memory://")


class Settings(BaseSettings):
    """SampleGraph service settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Required ===
    genius_key: str = Field(min_length=1)
    database_url: str = Field(min_length=1)
    redis_key_expiry: int = Field(gt=0)

    # === Upstream provider ===
    genius_base_url: str = "https://api.genius.com"
    upstream_timeout_seconds: float = Field(default=10.0, gt=0)

    # === Cache ===
    cache_timeout_seconds: float = Field(default=1.0, gt=0)
    cache_namespace: str = Field(default="samplegraph", min_length=1)

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"
    config_path: str = "config/config.yaml"

    @field_validator("genius_key", "database_url")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @field_validator("database_url")
    @classmethod
    def _known_scheme(cls, value: str) -> str:
        if not value.startswith(_CACHE_URL_SCHEMES):
            raise ValueError(f"unsupported scheme, expected one of {', '.join(_CACHE_URL_SCHEMES)}")
        return value

    @model_validator(mode="after")
    def _cache_faster_than_upstream(self) -> Settings:
        # A degraded cache must never stall a request longer than the upstream would.
        if self.cache_timeout_seconds >= self.upstream_timeout_seconds:
            raise ValueError("cache_timeout_seconds must be shorter than upstream_timeout_seconds")
        return self

    @property
    def uses_memory_cache(self) -> bool:
        """Return ``True`` when the in-process cache backend is selected."""
        return self.database_url.startswith("memory://")


def load_settings(**overrides: object) -> Settings:
    """Build :class:`Settings`, converting validation failures to ``ConfigurationError``.

    Keyword overrides take precedence over the environment (used by tests
    and the CLI).
    """
    try:
        return Settings(**overrides)
    except ValidationError as exc:
        problems = ", ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'settings'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigurationError(message=f"Invalid configuration ({problems})") from exc
