"""Error types raised by the Mailgun logging transport."""
from __future__ import annotations


class ConfigurationError(ValueError):
    """A required transport setting is missing or invalid."""


class DeliveryError(Exception):
    """The Mailgun API did not accept a message."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
