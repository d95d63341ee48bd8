"""
Domain errors raised by the service layer.

The HTTP app and the callable functions each map these onto their own
error codes, so nothing here depends on a transport.
"""

from __future__ import annotations


class ChronicleError(Exception):
    """Base class for errors surfaced verbatim to the caller."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ChronicleError):
    """A referenced label, assignment, log or exercise name does not exist."""


class UnauthorizedError(ChronicleError):
    """No valid credential accompanied the request."""

    def __init__(self, message: str = "You must be logged in to access this resource."):
        super().__init__(message)
