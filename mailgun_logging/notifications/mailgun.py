"""Mailgun log transport: turns log events into outbound emails."""
from __future__ import annotations

import logging
import pprint
from collections import defaultdict
from collections.abc import Mapping
from typing import Any

from ..client import MailgunClient
from ..config import NotifierConfig, validate_notifier_config
from ..interfaces.mail_client import MailClient
from ..interfaces.transport import Callback, Listener
from ..models import Attachment, LogEvent, MessageRequest

logger = logging.getLogger(__name__)

EVENTS = ("error", "logged")

# Nested levels expanded before the renderer collapses a container to "...".
METADATA_DEPTH = 6

_MISSING = object()


def render_metadata(metadata: Any) -> str:
    """Human-readable, deeply expanded rendering of log metadata."""
    return pprint.pformat(metadata, depth=METADATA_DEPTH, sort_dicts=False)


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, _MISSING)
    return getattr(obj, name, _MISSING)


def _has_metadata(metadata: Any) -> bool:
    if metadata is None:
        return False
    if isinstance(metadata, Mapping):
        return len(metadata) > 0
    return True


def compose_message(
    event: LogEvent, client: MailClient
) -> tuple[str, str | Attachment | None]:
    """Return the email body and attachment for ``event``.

    A string ``attachment`` is passed through as a file path, one carrying
    ``data`` is wrapped by ``client.attachment``. Any other metadata,
    including a malformed ``attachment``, is appended to the body.
    """
    body = event.message
    attachment: str | Attachment | None = None
    metadata = event.metadata

    if not _has_metadata(metadata):
        return body, attachment

    value = _field(metadata, "attachment")
    if value is _MISSING:
        body += "\n\n" + render_metadata(metadata)
    elif isinstance(value, str):
        attachment = value
    elif value is not None and _field(value, "data") is not _MISSING:
        attachment = client.attachment(value)
    else:
        body += "\n\n" + render_metadata(metadata)
    return body, attachment


class MailgunNotifier:
    """Deliver log events as emails through Mailgun.

    Delivery is best effort: :meth:`log` always reports success, and a
    failed send only surfaces through the ``error`` event.
    """

    def __init__(
        self, config: NotifierConfig, client: MailClient | None = None
    ) -> None:
        validate_notifier_config(config)

        self.config = config
        self.recipient = config.recipient
        self.sender = config.sender
        self.level = config.level
        self.silent = config.silent
        self.subject = config.subject
        self.handle_exceptions = config.handle_exceptions

        if client is None:
            client = MailgunClient(
                api_key=config.api_key,
                domain=config.domain,
                proxy=config.proxy,
                timeout=config.timeout,
                base_url=config.base_url,
            )
        self.client = client
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    @classmethod
    def create(
        cls, config: NotifierConfig, client: MailClient | None = None
    ) -> MailgunNotifier:
        return cls(config, client)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def on(self, event: str, listener: Listener) -> None:
        """Register ``listener`` for ``"error"`` or ``"logged"``."""
        if event not in EVENTS:
            raise ValueError(f"Unknown event '{event}'")
        self._listeners[event].append(listener)

    def off(self, event: str, listener: Listener) -> None:
        if listener in self._listeners.get(event, []):
            self._listeners[event].remove(listener)

    def _emit(self, event: str, *args: Any) -> None:
        listeners = list(self._listeners.get(event, []))
        if event == "error" and not listeners:
            logger.warning("Mailgun delivery failed: %s", args[0] if args else "")
        for listener in listeners:
            try:
                listener(*args)
            except Exception:
                logger.exception("Listener for '%s' event failed", event)

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def build_request(self, event: LogEvent) -> MessageRequest:
        body, attachment = compose_message(event, self.client)
        return MessageRequest(
            sender=self.sender,
            recipient=self.recipient,
            subject=self.subject,
            text=body,
            attachment=attachment,
        )

    async def log(
        self,
        level: str,
        message: str,
        metadata: Any = None,
        callback: Callback | None = None,
    ) -> bool:
        """Send one log event. Always returns ``True``.

        ``callback(None, True)`` is invoked exactly once, after the send
        completes (or immediately when silent).
        """
        if self.silent:
            if callback is not None:
                callback(None, True)
            return True

        try:
            request = self.build_request(LogEvent(level, message, metadata))
            await self.client.send(request)
        except Exception as e:
            self._emit("error", e)
        else:
            logger.debug("Mailed %s log event to %s", level, self.recipient)

        self._emit("logged")
        if callback is not None:
            callback(None, True)
        return True
