"""Exception types shared across the badge API."""

from typing import Optional


class BadgeApiError(Exception):
    """Base class for all badge API errors."""


class QueryValidationError(BadgeApiError, ValueError):
    """Caller supplied a malformed parameter; rendered as HTTP 400."""


class UpstreamError(BadgeApiError):
    """An upstream fetch failed (transport, status code or body)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PackageNotFoundError(UpstreamError):
    """The upstream source has no such package.

    Absence is a valid badge outcome, not a failure of the service.
    """


class AuthenticationRequiredError(UpstreamError):
    """The upstream source rejected the (missing) credential."""


class InvalidPayloadError(BadgeApiError, ValueError):
    """An upstream document failed structural validation."""
