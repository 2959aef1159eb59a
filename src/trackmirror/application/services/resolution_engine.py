"""Resolution Engine - turns an identifier string into track metadata.

Hey future me - this is the single entry point for "what is this link/query?".
Flow for every call:

  identifier → classify() → DirectUrl    → provider.lookup(captures)
                          → SearchQuery  → provider.search(text, limit)
                          → Unrecognized → None (caller may try another resolver)

Every provider call goes through the RetryPolicy. What comes back is ALWAYS a
ResolvedItem (or None for Unrecognized):

- timeouts retried, then NotFound when the budget runs out
- transport/protocol failures → ResolvedItem.failed(cause), NOT retried
- empty or half-broken responses → NotFound, the parsers already dropped bad records

Only ConfigurationError (two URL patterns claiming one identifier) and real bugs
escape as exceptions. CancelledError always propagates untouched.

Usage:
```python
engine = ResolutionEngine(registry, retry_policy=RetryPolicy.from_settings(settings.retry))
item = await engine.resolve("lfmsearch:shape of you")
```
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING

from trackmirror.domain.dtos import ResolvedItem, TrackMetadata
from trackmirror.domain.exceptions import (
    ConfigurationError,
    ProviderProtocolError,
    ProviderTransportError,
    RetriesExhaustedError,
)
from trackmirror.domain.value_objects import (
    DirectUrl,
    Identifier,
    SearchQuery,
    Unrecognized,
)
from trackmirror.infrastructure.observability import correlation_scope
from trackmirror.infrastructure.retry import RetryPolicy

if TYPE_CHECKING:
    from trackmirror.domain.ports import ProviderDescriptor
    from trackmirror.infrastructure.providers import ProviderRegistry

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 6


class ResolutionEngine:
    """Classify identifiers and dispatch them to the owning provider."""

    def __init__(
        self,
        registry: ProviderRegistry,
        retry_policy: RetryPolicy | None = None,
        search_limit: int = DEFAULT_SEARCH_LIMIT,
    ) -> None:
        """Initialize the engine.

        Args:
            registry: Provider table to classify against
            retry_policy: Timeout retry policy (default: 2 retries, exponential backoff)
            search_limit: Maximum number of results requested per search
        """
        self._registry = registry
        self._retry_policy = retry_policy or RetryPolicy()
        self._search_limit = search_limit

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def search_limit(self) -> int:
        return self._search_limit

    def classify(self, identifier: str) -> Identifier:
        """Tag an identifier as DirectUrl, SearchQuery or Unrecognized.

        URL patterns are checked first (all of them, so overlaps are caught),
        then search prefixes in registration order.

        Args:
            identifier: Raw identifier string

        Returns:
            Classified identifier

        Raises:
            ConfigurationError: More than one provider URL pattern matches
        """
        url_matches = []
        for provider in self._registry.all():
            match = provider.match_url(identifier)
            if match is not None:
                url_matches.append((provider, match))

        if len(url_matches) > 1:
            names = ", ".join(provider.name for provider, _ in url_matches)
            raise ConfigurationError(
                f"URL patterns of providers {names} all match {identifier!r}"
            )

        if url_matches:
            provider, match = url_matches[0]
            captures = {k: v for k, v in match.groupdict().items() if v is not None}
            return DirectUrl(provider=provider.name, raw=identifier, captures=captures)

        for provider in self._registry.all():
            text = provider.strip_prefix(identifier)
            if text is not None:
                # strip_prefix only returns text for providers with a prefix
                assert provider.search_prefix is not None
                return SearchQuery(
                    provider=provider.name, prefix=provider.search_prefix, text=text
                )

        return Unrecognized(raw=identifier)

    async def resolve(self, identifier: str) -> ResolvedItem | None:
        """Resolve an identifier to a track, playlist, NotFound or Error.

        Args:
            identifier: Provider URL or ``<prefix><query>`` string

        Returns:
            ResolvedItem, or None when no registered provider recognizes the identifier

        Raises:
            ConfigurationError: Overlapping provider URL patterns
        """
        classified = self.classify(identifier)
        if isinstance(classified, Unrecognized):
            logger.debug("No provider recognizes identifier %r", identifier)
            return None

        with correlation_scope():
            provider = self._provider(classified.provider)

            if isinstance(classified, SearchQuery):
                text = classified.text.strip()
                if not text:
                    logger.info("Empty %s query, nothing to search", provider.name)
                    return ResolvedItem.not_found()
                return await self._run(
                    provider,
                    lambda: self._search_call(provider, text, self._search_limit),
                    label=f"{provider.name} search {text!r}",
                )

            return await self._run(
                provider,
                lambda: self._lookup_call(provider, classified),
                label=f"{provider.name} lookup {classified.raw}",
            )

    async def resolve_many(self, identifiers: Sequence[str]) -> list[ResolvedItem | None]:
        """Resolve several identifiers concurrently.

        Results come back in input order. Each resolution gets its own
        correlation ID because gather() runs every coroutine in its own task.
        """
        return list(await asyncio.gather(*(self.resolve(i) for i in identifiers)))

    async def search(
        self, provider_name: str, text: str, limit: int | None = None
    ) -> list[TrackMetadata]:
        """Run one provider's search under the retry policy.

        Used by the mirror resolver, which needs the raw candidate list instead
        of a playlist item.

        Args:
            provider_name: Registered provider with a search operation
            text: Free-text query
            limit: Result limit (default: engine search limit)

        Returns:
            Parsed candidates in provider order, empty on NotFound or exhausted retries

        Raises:
            ConfigurationError: Provider unknown or not searchable
            ProviderTransportError: Non-timeout transport failure
            ProviderProtocolError: Response was not the expected JSON shape
        """
        provider = self._provider(provider_name)
        if provider.search is None:
            raise ConfigurationError(f"Provider {provider_name} does not support search")

        text = text.strip()
        if not text:
            return []

        effective_limit = limit or self._search_limit
        try:
            item = await self._retry_policy.execute(
                lambda: self._search_call(provider, text, effective_limit),
                label=f"{provider.name} search {text!r}",
                provider=provider.name,
            )
        except RetriesExhaustedError:
            logger.info("%s search for %r ran out of retries", provider.name, text)
            return []
        return list(item.tracks)

    def _provider(self, name: str) -> ProviderDescriptor:
        provider = self._registry.get(name)
        if provider is None:
            raise ConfigurationError(f"Provider {name} is not registered")
        return provider

    @staticmethod
    def _search_call(
        provider: ProviderDescriptor, text: str, limit: int
    ) -> Awaitable[ResolvedItem]:
        assert provider.search is not None
        return provider.search(text, limit)

    @staticmethod
    def _lookup_call(provider: ProviderDescriptor, url: DirectUrl) -> Awaitable[ResolvedItem]:
        assert provider.lookup is not None
        return provider.lookup(url.captures)

    async def _run(
        self,
        provider: ProviderDescriptor,
        operation: Callable[[], Awaitable[ResolvedItem]],
        label: str,
    ) -> ResolvedItem:
        """Execute a provider call and map failures onto ResolvedItem."""
        try:
            item = await self._retry_policy.execute(
                operation, label=label, provider=provider.name
            )
        except RetriesExhaustedError as e:
            logger.info("%s: %s, treating as not found", provider.name, e.message)
            return ResolvedItem.not_found()
        except (ProviderTransportError, ProviderProtocolError) as e:
            logger.error("%s failed: %s", label, e.message, exc_info=True)
            return ResolvedItem.failed(e)

        if item.is_not_found:
            logger.info("No result for %s", label)
        return item
