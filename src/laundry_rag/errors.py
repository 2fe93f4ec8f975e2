"""Errors raised by the completion client.

Retrieval failures never appear here: the embedding adapter and the
retrievers absorb them and return empty results instead.
"""


class CompletionError(Exception):
    """Base class for every failure of a completion request."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        detail: str = "",
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class ConfigurationError(CompletionError):
    """A required credential or setting is missing; nothing was sent."""


class AuthenticationError(CompletionError):
    """The service rejected the credential or the account balance."""


class RateLimitError(CompletionError):
    """The service is throttling requests (HTTP 429)."""


class BadRequestError(CompletionError):
    """The service rejected the request itself, e.g. an unknown model."""


class UpstreamError(CompletionError):
    """Any other non-success status or a transport failure."""
