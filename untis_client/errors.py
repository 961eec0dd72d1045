"""Exceptions raised by the WebUntis client."""

from __future__ import annotations


class UntisError(Exception):
    """Base class for all client errors."""


class TransportError(UntisError):
    """The HTTP round trip failed or returned something that is not JSON-RPC."""


class ApiError(UntisError):
    """The server answered with an error envelope."""

    def __init__(self, message: str, code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code


class LoginFailure(ApiError):
    """The server rejected a login or refresh attempt."""


class DecodeError(UntisError):
    """A payload did not have the expected shape."""


class SessionStateError(UntisError):
    """An operation was attempted on a session that is not logged in."""
