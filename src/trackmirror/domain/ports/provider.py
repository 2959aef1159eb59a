"""Provider descriptor port.

Every metadata provider is described by one ``ProviderDescriptor`` record.
The ResolutionEngine iterates a table of these instead of dispatching through
a class hierarchy: URL pattern and search prefix drive classification, the
``lookup``/``search`` coroutines do the provider-specific work.

Implementations live in ``trackmirror.infrastructure.providers``.
"""

import re
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass

from trackmirror.domain.dtos import ResolvedItem
from trackmirror.domain.exceptions import ConfigurationError

# lookup(captures) -> ResolvedItem for a direct URL
LookupFn = Callable[[Mapping[str, str]], Awaitable[ResolvedItem]]
# search(text, limit) -> ResolvedItem for a prefixed search query
SearchFn = Callable[[str, int], Awaitable[ResolvedItem]]


@dataclass(frozen=True)
class ProviderDescriptor:
    """Capability record for one metadata provider.

    Attributes:
        name: Provider name, also used as ``TrackMetadata.source``
        url_pattern: Compiled pattern with named groups, or None if the
            provider has no direct URLs (slider.kz is search-only)
        search_prefix: Identifier prefix including its colon (``"lfmsearch:"``)
        lookup: Coroutine resolving URL captures to an item
        search: Coroutine resolving free text to an item
        mirror_eligible: Whether tracks from this provider carry a playable
            stream, i.e. whether it can act as a mirror for other providers
    """

    name: str
    url_pattern: re.Pattern[str] | None = None
    search_prefix: str | None = None
    lookup: LookupFn | None = None
    search: SearchFn | None = None
    mirror_eligible: bool = False

    def __post_init__(self) -> None:
        """Validate that declared capabilities have an implementation."""
        if not self.name:
            raise ConfigurationError("Provider name cannot be empty")
        if self.url_pattern is not None and self.lookup is None:
            raise ConfigurationError(
                f"Provider {self.name} declares a URL pattern but no lookup"
            )
        if self.search_prefix is not None and self.search is None:
            raise ConfigurationError(
                f"Provider {self.name} declares a search prefix but no search"
            )
        if self.mirror_eligible and self.search is None:
            raise ConfigurationError(
                f"Mirror provider {self.name} must support search"
            )

    def match_url(self, identifier: str) -> re.Match[str] | None:
        """Full-match ``identifier`` against this provider's URL pattern."""
        if self.url_pattern is None:
            return None
        return self.url_pattern.fullmatch(identifier)

    def strip_prefix(self, identifier: str) -> str | None:
        """Return the query text if ``identifier`` carries our search prefix."""
        if self.search_prefix is None or not identifier.startswith(self.search_prefix):
            return None
        return identifier[len(self.search_prefix) :]
