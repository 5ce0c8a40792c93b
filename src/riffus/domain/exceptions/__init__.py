"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, we store message as an attribute so handlers can read it without parsing
    # str(exception). Don't raise this directly - always use a subclass so callers catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationError(DomainException):
    """Input validation failed.

    Raised for missing or malformed request input (blank search query,
    non-numeric track id, order without any track reference).

    HTTP Status: 400. Never retried.
    """

    pass


class NotFoundError(DomainException):
    """Raised when the provider answers successfully but has no match.

    HTTP Status: 404. Never retried.
    """

    # entity_type and entity_id are kept separately so handlers can log them structured.
    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class UpstreamError(DomainException):
    """Upstream catalog provider (iTunes, Deezer, Spotify) failed.

    Raised by providers once the resilient fetch client has exhausted its
    attempts. The original error is chained as ``__cause__``.

    HTTP Status: 500 with a generic message (detail only in development).

    Example:
        raise UpstreamError("Failed to search itunes: 503 Service Unavailable") from e
    """

    def __init__(self, message: str, provider: str | None = None) -> None:
        super().__init__(message)
        self.provider = provider


class ConfigurationError(DomainException):
    """Application misconfiguration.

    Raised at startup when required configuration is missing or invalid
    (unknown provider name, missing Spotify credentials).

    Example:
        raise ConfigurationError("Unknown provider 'napster'")
    """

    pass


__all__ = [
    "ConfigurationError",
    "DomainException",
    "NotFoundError",
    "UpstreamError",
    "ValidationError",
]
