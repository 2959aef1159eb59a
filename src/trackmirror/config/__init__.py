"""Configuration module for trackmirror."""

from .settings import (
    HttpSettings,
    LastfmSettings,
    MirrorSettings,
    ResolutionSettings,
    RetrySettings,
    Settings,
    SliderKzSettings,
    TidalSettings,
    get_settings,
)

__all__ = [
    "HttpSettings",
    "LastfmSettings",
    "MirrorSettings",
    "ResolutionSettings",
    "RetrySettings",
    "Settings",
    "SliderKzSettings",
    "TidalSettings",
    "get_settings",
]
