"""Mailgun HTTP API client."""
from __future__ import annotations

import asyncio
import logging
import ssl
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import aiohttp
import certifi

from ..config import DEFAULT_BASE_URL
from ..errors import DeliveryError
from ..models import Attachment, MessageRequest

logger = logging.getLogger(__name__)


class MailgunClient:
    """Send messages through the Mailgun ``messages`` endpoint.

    The client only holds settings; a session is opened per send, so
    constructing one performs no network activity.
    """

    def __init__(
        self,
        api_key: str,
        domain: str,
        proxy: str | None = None,
        timeout: float | None = None,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        self.api_key = api_key
        self.domain = domain
        self.proxy = proxy
        self.timeout = timeout
        self.base_url = base_url.rstrip("/")

    @property
    def messages_url(self) -> str:
        return f"{self.base_url}/{self.domain}/messages"

    def attachment(self, spec: Any) -> Attachment:
        """Build an :class:`Attachment` from a mapping or object with ``data``."""
        if isinstance(spec, Attachment):
            return spec
        if isinstance(spec, Mapping):
            data = spec["data"]
            filename = spec.get("filename")
            content_type = spec.get("content_type") or spec.get("contentType")
        else:
            data = spec.data
            filename = getattr(spec, "filename", None)
            content_type = getattr(spec, "content_type", None)

        if isinstance(data, (bytearray, memoryview)):
            data = bytes(data)
        if not filename:
            filename = Path(data).name if isinstance(data, str) else "attachment"
        return Attachment(data=data, filename=filename, content_type=content_type)

    def _build_form(self, request: MessageRequest) -> aiohttp.FormData:
        form = aiohttp.FormData()
        form.add_field("from", request.sender)
        for address in request.recipients:
            form.add_field("to", address)
        if request.subject is not None:
            form.add_field("subject", request.subject)
        form.add_field("text", request.text)

        attachment = request.attachment
        if isinstance(attachment, str):
            path = Path(attachment)
            form.add_field("attachment", path.read_bytes(), filename=path.name)
        elif attachment is not None:
            data = attachment.data
            if isinstance(data, str):
                data = Path(data).read_bytes()
            form.add_field(
                "attachment",
                data,
                filename=attachment.filename,
                content_type=attachment.content_type,
            )
        return form

    async def send(self, request: MessageRequest) -> dict[str, Any]:
        """POST one message. Raises :class:`DeliveryError` on any failure."""
        try:
            form = self._build_form(request)
        except OSError as e:
            raise DeliveryError(f"Cannot read attachment: {e}") from e

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        kwargs: dict[str, Any] = {}
        if self.timeout:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=self.timeout)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.post(
                    self.messages_url,
                    data=form,
                    auth=aiohttp.BasicAuth("api", self.api_key),
                    proxy=self.proxy,
                    **kwargs,
                ) as response:
                    if response.status != 200:
                        detail = await response.text()
                        logger.error(
                            "Mailgun rejected message: HTTP %s %s",
                            response.status,
                            detail,
                        )
                        raise DeliveryError(
                            f"Mailgun API error {response.status}: {detail}",
                            status=response.status,
                        )
                    result = await response.json()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("Failed to reach Mailgun: %s", e)
            raise DeliveryError(f"Mailgun request failed: {e}") from e

        logger.debug("Mailgun accepted message %s", result.get("id"))
        return result
