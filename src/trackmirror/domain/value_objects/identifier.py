"""Classified identifiers.

An identifier is the raw string a caller hands to the engine. Classification
tags it exactly once as a direct provider URL, a prefixed search query, or
something no registered provider understands.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class DirectUrl:
    """Identifier matched a provider URL pattern."""

    provider: str
    raw: str
    captures: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "captures", MappingProxyType(dict(self.captures)))


@dataclass(frozen=True)
class SearchQuery:
    """Identifier of the form ``<prefix><free text>``."""

    provider: str
    prefix: str
    text: str


@dataclass(frozen=True)
class Unrecognized:
    """No registered provider handles this identifier."""

    raw: str


Identifier = DirectUrl | SearchQuery | Unrecognized
