"""Provider descriptors and the registry the engine iterates."""

from trackmirror.infrastructure.providers.lastfm_provider import create_lastfm_provider
from trackmirror.infrastructure.providers.registry import ProviderRegistry
from trackmirror.infrastructure.providers.sliderkz_provider import create_sliderkz_provider
from trackmirror.infrastructure.providers.tidal_provider import create_tidal_provider

__all__ = [
    "ProviderRegistry",
    "create_lastfm_provider",
    "create_sliderkz_provider",
    "create_tidal_provider",
]
