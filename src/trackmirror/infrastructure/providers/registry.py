"""Provider Registry implementation.

Holds the table of provider descriptors the ResolutionEngine iterates.
Registration order is kept: it is the iteration order for classification and
the default order of ``mirror_providers()``.
"""

import logging

from trackmirror.domain.exceptions import ConfigurationError
from trackmirror.domain.ports import ProviderDescriptor

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Registry for provider descriptors.

    Names and search prefixes must be unique. URL patterns must be disjoint,
    which can't be proven up front: the engine raises ConfigurationError when
    two patterns claim the same identifier.
    """

    def __init__(self, providers: list[ProviderDescriptor] | None = None) -> None:
        """Initialize registry, optionally with an initial provider list."""
        self._providers: dict[str, ProviderDescriptor] = {}
        for provider in providers or []:
            self.register(provider)

    def register(self, provider: ProviderDescriptor) -> None:
        """Register a provider.

        Args:
            provider: Descriptor to register

        Raises:
            ConfigurationError: Name or search prefix already taken
        """
        if provider.name in self._providers:
            raise ConfigurationError(f"Provider {provider.name} is already registered")

        if provider.search_prefix is not None:
            for other in self._providers.values():
                if other.search_prefix is None:
                    continue
                # "ab:" and "ab:c" would make prefix matching order-dependent
                if other.search_prefix.startswith(
                    provider.search_prefix
                ) or provider.search_prefix.startswith(other.search_prefix):
                    raise ConfigurationError(
                        f"Search prefix {provider.search_prefix!r} of {provider.name} "
                        f"collides with {other.search_prefix!r} of {other.name}"
                    )

        self._providers[provider.name] = provider
        logger.info(
            "Registered provider: %s (url=%s, prefix=%s, mirror=%s)",
            provider.name,
            provider.url_pattern is not None,
            provider.search_prefix,
            provider.mirror_eligible,
        )

    def unregister(self, name: str) -> None:
        """Unregister a provider by name."""
        if name in self._providers:
            self._providers.pop(name)
            logger.info("Unregistered provider: %s", name)

    def get(self, name: str) -> ProviderDescriptor | None:
        """Get a specific provider by name."""
        return self._providers.get(name)

    def all(self) -> list[ProviderDescriptor]:
        """Get all registered providers in registration order."""
        return list(self._providers.values())

    def mirror_providers(self) -> list[ProviderDescriptor]:
        """Get providers able to act as mirrors."""
        return [p for p in self._providers.values() if p.mirror_eligible]

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def __len__(self) -> int:
        return len(self._providers)
