"""Data models: all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class LogEvent:
    """Single log call handed to the transport."""

    level: str
    message: str
    metadata: Any = None


@dataclass(frozen=True)
class Attachment:
    """Binary attachment. ``data`` is raw bytes or a path read at send time."""

    data: bytes | str
    filename: str = "attachment"
    content_type: str | None = None


@dataclass(frozen=True)
class MessageRequest:
    """Outbound email, mirroring the Mailgun ``messages`` form fields."""

    sender: str
    recipient: str | tuple[str, ...]
    subject: str | None
    text: str
    attachment: str | Attachment | None = None

    @property
    def recipients(self) -> tuple[str, ...]:
        if isinstance(self.recipient, str):
            return (self.recipient,)
        return tuple(self.recipient)
