"""Application settings loaded from environment variables.

Every value can be overridden with ``TRACKMIRROR_<SECTION>__<FIELD>``, e.g.
``TRACKMIRROR_LASTFM__API_KEY=...`` or ``TRACKMIRROR_MIRROR__MATCH_MODE=fuzzy``.
"""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HttpSettings(BaseModel):
    """Outbound HTTP settings shared by all provider clients."""

    timeout: float = Field(
        default=10.0,
        gt=0,
        description="Per-call timeout in seconds; hitting it triggers the retry policy",
    )


class RetrySettings(BaseModel):
    """Timeout retry policy."""

    max_retries: int = Field(default=2, ge=0, description="Retries after the first attempt")
    initial_delay: float = Field(default=0.5, ge=0)
    backoff_factor: float = Field(default=2.0, ge=1.0)
    max_delay: float = Field(default=5.0, ge=0)


class ResolutionSettings(BaseModel):
    """Resolution engine settings."""

    search_limit: int = Field(default=6, ge=1, le=100)


class LastfmSettings(BaseModel):
    """Last.fm API settings.

    Hey future me - the API key USED to be a compiled-in constant. Now it's
    injected; with an empty key the Last.fm provider is simply not registered.
    """

    api_key: str = ""
    user_agent: str = "Last.fm/1.0"

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


class SliderKzSettings(BaseModel):
    """slider.kz settings (public, no credentials)."""

    enabled: bool = True
    base_url: str = "https://hayqbhgr.slider.kz/"


class TidalSettings(BaseModel):
    """Tidal public API settings."""

    token: str = ""
    country_code: str = "US"
    user_agent: str = "TIDAL/3704 CFNetwork/1220.1 Darwin/20.3.0"

    @field_validator("country_code", mode="before")
    @classmethod
    def _default_country(cls, value: str | None) -> str:
        # Blank country code falls back to US, same as the Tidal apps do
        if value is None or not str(value).strip():
            return "US"
        return str(value).strip().upper()

    @property
    def is_configured(self) -> bool:
        return bool(self.token)


class MirrorSettings(BaseModel):
    """Mirror resolution policy."""

    providers: list[str] = Field(
        default_factory=lambda: ["sliderkz"],
        description="Mirror providers in priority order",
    )
    duration_tolerance_ms: int = Field(default=2000, ge=0)
    match_mode: Literal["exact", "fuzzy"] = "exact"
    fuzzy_threshold: float = Field(default=90.0, ge=0, le=100)
    include_duration_in_query: bool = False


class ObservabilitySettings(BaseModel):
    """Logging output settings."""

    log_json_format: bool = False


class Settings(BaseSettings):
    """Top-level settings for trackmirror."""

    model_config = SettingsConfigDict(
        env_prefix="TRACKMIRROR_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "trackmirror"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    http: HttpSettings = Field(default_factory=HttpSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    resolution: ResolutionSettings = Field(default_factory=ResolutionSettings)
    lastfm: LastfmSettings = Field(default_factory=LastfmSettings)
    sliderkz: SliderKzSettings = Field(default_factory=SliderKzSettings)
    tidal: TidalSettings = Field(default_factory=TidalSettings)
    mirror: MirrorSettings = Field(default_factory=MirrorSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance (loaded once)."""
    return Settings()
