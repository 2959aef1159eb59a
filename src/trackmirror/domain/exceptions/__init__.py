"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so code can inspect it without parsing
    # str(exception). Never raise this directly, always a subclass so callers can catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationError(DomainException):
    """Input validation failed.

    Raised when a record would violate its invariants (negative duration,
    empty title, more than one ResolvedItem payload populated).
    """

    pass


class ConfigurationError(DomainException):
    """Application misconfiguration.

    Raised at wiring time (unknown mirror provider, duplicate search prefix)
    and at classification time when two URL patterns claim one identifier.
    """

    pass


# =============================================================================
# Provider failures
# These map onto the resolution taxonomy: transient (timeout, retried),
# transport (not retried), protocol (unexpected response shape).
# =============================================================================


class ProviderError(DomainException):
    """Base class for failures talking to a metadata provider."""

    def __init__(self, message: str, provider: str | None = None) -> None:
        super().__init__(message)
        self.provider = provider


class TransientProviderError(ProviderError):
    """A failure that is expected to go away when retried (timeouts)."""

    pass


class RetriesExhaustedError(TransientProviderError):
    """All retry attempts for a transient failure were used up.

    The engine degrades this to a NotFound result, it never reaches callers
    of ``resolve``.
    """

    def __init__(self, message: str, attempts: int, provider: str | None = None) -> None:
        super().__init__(message, provider)
        self.attempts = attempts


class ProviderTransportError(ProviderError):
    """Non-timeout transport failure (connection refused, HTTP 5xx, ...).

    Not retried. Surfaces as ``ResolvedItem.failed``.
    """

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, provider)
        self.status_code = status_code


class ProviderProtocolError(ProviderError):
    """Response shape outside the documented provider variance.

    Example: a body that is not JSON, or JSON whose top level is a list where
    an object is expected. Missing nested keys are NOT protocol errors.
    """

    pass


class MalformedRecordError(DomainException):
    """A single provider record could not be turned into a track.

    Parsers raise this internally; ``parse_list`` catches it per record and
    drops the entry so the rest of the batch survives.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class CorruptTrackStateError(DomainException):
    """Persisted track state could not be decoded.

    Fatal for that record only. Distinct from "no result" so callers can
    decide to re-resolve from the canonical URL instead.
    """

    def __init__(self, message: str, offset: int | None = None) -> None:
        super().__init__(message)
        self.offset = offset
