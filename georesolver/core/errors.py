"""Error taxonomy for coordinate resolution.

Every error carries a short ``code`` so callers and metrics can classify
failures without matching on message text.
"""

from geopy.exc import GeocoderServiceError


class GeoResolverError(Exception):
    """Base class for all resolver errors."""

    code = "geo-resolver-error"


class InvalidInputError(GeoResolverError, ValueError):
    """Malformed, oversized or out-of-range address or coordinates."""

    code = "invalid-input"


class RateLimitedError(GeoResolverError):
    """Caller exceeded its request quota for the current window."""

    code = "rate-limited"

    def __init__(self, client_id: str, retry_after: float):
        self.client_id = client_id
        self.retry_after = retry_after
        super().__init__(
            f"Rate limit exceeded for client '{client_id}'. "
            f"Retry in {retry_after:.1f} seconds."
        )


class ProviderError(GeoResolverError, GeocoderServiceError):
    """A provider answered with something the resolver cannot use.

    Raised for unparseable payloads (``reason="parse"``) and out-of-range
    coordinates (``reason="invalid"``). Transport, quota and authentication
    failures stay geopy exceptions. Subclasses geopy's
    ``GeocoderServiceError`` so both are handled and retried alike.
    """

    code = "provider-error"

    def __init__(self, provider: str, reason: str, message: str):
        self.provider = provider
        self.reason = reason
        super().__init__(f"{provider} {reason} error: {message}")


class NotFoundError(GeoResolverError, LookupError):
    """Provider answered but found nothing for the query."""

    code = "not-found"

    def __init__(self, provider: str, query: str):
        self.provider = provider
        self.query = query
        super().__init__(f"No results found in {provider}")


class AllProvidersFailedError(GeoResolverError):
    """Every geocoding tier was exhausted without a result."""

    code = "all-providers-failed"

    def __init__(self, causes: dict[str, str] | None = None):
        self.causes = causes or {}
        detail = "; ".join(f"{tier}: {cause}" for tier, cause in self.causes.items())
        message = "All geocoding services failed"
        super().__init__(f"{message} ({detail})" if detail else message)


class ConflictUnresolvedError(GeoResolverError):
    """A coordinate conflict could not be arbitrated at all."""

    code = "conflict-unresolved"


class RegistrationConflictError(GeoResolverError):
    """A verified destination already exists within the duplicate radius."""

    code = "registration-conflict"

    def __init__(self, existing_id: str, existing_name: str):
        self.existing_id = existing_id
        self.existing_name = existing_name
        super().__init__(
            f"Destination already exists nearby: {existing_name} ({existing_id})"
        )


class DestinationNotFoundError(GeoResolverError, LookupError):
    """No verified destination with the given id."""

    code = "not-found"

    def __init__(self, destination_id: str):
        self.destination_id = destination_id
        super().__init__(f"Destination not found: {destination_id}")
