"""Exception hierarchy for the WeChat Pay client.

Every failure is raised to the immediate caller. Nothing is retried.
"""

from __future__ import annotations

from typing import Any


class WxPayError(Exception):
    """Base class for all client errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class TransportError(WxPayError):
    """Connection, read or HTTP status failure talking to the gateway."""


class MalformedResponse(WxPayError):
    """The response could not be decoded or carries no valid ``return_code``."""


class TrustFailure(WxPayError):
    """A ``SUCCESS`` response whose signature does not match.

    The payload must not be trusted and is not returned.
    """


class ConfigurationError(WxPayError):
    """Client misconfiguration, e.g. certificate material missing when required."""
