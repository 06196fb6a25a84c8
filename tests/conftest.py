"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from mailgun_logging.config import NotifierConfig
from mailgun_logging.errors import DeliveryError
from mailgun_logging.models import Attachment
from mailgun_logging.notifications import MailgunNotifier


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_notifier_config() -> NotifierConfig:
    return NotifierConfig(
        recipient="ops@example.com",
        api_key="key-123",
        domain="mg.example.com",
        sender="app@mg.example.com",
        level="info",
        subject="App log",
    )


@pytest.fixture()
def silent_notifier_config(sample_notifier_config: NotifierConfig) -> NotifierConfig:
    return NotifierConfig(
        recipient=sample_notifier_config.recipient,
        api_key=sample_notifier_config.api_key,
        domain=sample_notifier_config.domain,
        silent=True,
    )


# ---------------------------------------------------------------------------
# Stub delivery client
# ---------------------------------------------------------------------------


def _stub_attachment(spec: Any) -> Attachment:
    data = spec["data"] if isinstance(spec, dict) else spec.data
    return Attachment(data=data, filename="attachment")


@pytest.fixture()
def stub_client() -> MagicMock:
    client = MagicMock()
    client.send = AsyncMock(return_value={"id": "<1@mg.example.com>", "message": "Queued"})
    client.attachment = MagicMock(side_effect=_stub_attachment)
    return client


@pytest.fixture()
def failing_client(stub_client: MagicMock) -> MagicMock:
    stub_client.send.side_effect = DeliveryError("Mailgun API error 401: Forbidden", status=401)
    return stub_client


@pytest.fixture()
def notifier(sample_notifier_config: NotifierConfig, stub_client: MagicMock) -> MailgunNotifier:
    return MailgunNotifier(sample_notifier_config, client=stub_client)


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    log_level: DEBUG
    mailgun:
      to: ops@example.com
      api_key: "key-123"
      domain: mg.example.com
      from: app@mg.example.com
      subject: "App log"
      level: warn
      timeout: 5
      handle_exceptions: true
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file


# ---------------------------------------------------------------------------
# aiohttp mocks
# ---------------------------------------------------------------------------


def make_session(status: int = 200, payload: dict | None = None, text: str = "") -> AsyncMock:
    """Return a mocked ``aiohttp.ClientSession`` whose ``post`` yields one response."""
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.json = AsyncMock(return_value=payload or {})
    mock_response.text = AsyncMock(return_value=text)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)

    mock_session = AsyncMock()
    mock_session.post = MagicMock(return_value=mock_response)
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    return mock_session


@pytest.fixture()
def session_factory():
    return make_session
