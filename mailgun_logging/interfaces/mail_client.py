"""Mail client protocol: email delivery API abstraction."""
from typing import Any, Protocol

from ..models import Attachment, MessageRequest


class MailClient(Protocol):
    """Abstract interface for an email-delivery API."""

    async def send(self, request: MessageRequest) -> dict[str, Any]: ...

    def attachment(self, spec: Any) -> Attachment: ...
