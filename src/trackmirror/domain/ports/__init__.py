"""Domain ports (interfaces) for dependency inversion."""

from trackmirror.domain.ports.provider import LookupFn, ProviderDescriptor, SearchFn

__all__ = ["LookupFn", "ProviderDescriptor", "SearchFn"]
