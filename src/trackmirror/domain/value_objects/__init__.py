"""Domain value objects."""

from trackmirror.domain.value_objects.identifier import (
    DirectUrl,
    Identifier,
    SearchQuery,
    Unrecognized,
)

__all__ = ["DirectUrl", "Identifier", "SearchQuery", "Unrecognized"]
