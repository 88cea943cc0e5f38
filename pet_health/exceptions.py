"""Exceptions raised inside the report pipeline."""

from typing import Optional


class PetHealthError(Exception):
    """Base class for pipeline errors."""


class StoreConfigError(PetHealthError):
    """The time-series store cannot be queried because configuration is missing."""


class StoreTransportError(PetHealthError):
    """The store could not be reached, timed out, or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class StoreResponseError(PetHealthError):
    """The store answered, but the body is not the expected query result.

    ``routing`` is set when the body is HTML, which means the request hit a
    web page (proxy or SPA fallback) instead of the query API.
    """

    def __init__(self, message: str, routing: bool = False):
        super().__init__(message)
        self.routing = routing


class OverrideValidationError(PetHealthError, ValueError):
    """A manual override payload was rejected before merging."""
