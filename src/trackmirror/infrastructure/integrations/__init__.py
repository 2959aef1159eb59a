"""External integration client implementations."""

from trackmirror.infrastructure.integrations.base_client import ProviderHttpClient
from trackmirror.infrastructure.integrations.lastfm_client import LastfmClient
from trackmirror.infrastructure.integrations.sliderkz_client import SliderKzClient
from trackmirror.infrastructure.integrations.tidal_client import TidalClient

__all__ = [
    "LastfmClient",
    "ProviderHttpClient",
    "SliderKzClient",
    "TidalClient",
]
