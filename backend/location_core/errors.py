"""Errors raised by the location core.

Client input errors and storage failures propagate to the HTTP layer; external
service failures never do, the resolver absorbs them into the fallback location.
"""


class UnrecognizedPlatformError(ValueError):
    """The shared URL is not something a post can be resolved from."""

    def __init__(self, url: str) -> None:
        super().__init__(f"Unrecognized post URL: {url!r}")
        self.url = url


class ExternalServiceError(RuntimeError):
    """Transport, HTTP status or response-shape failure from an external service."""

    def __init__(self, service: str, message: str) -> None:
        super().__init__(f"{service}: {message}")
        self.service = service


class StorageError(RuntimeError):
    """A read or mandatory write against the relational store failed."""
