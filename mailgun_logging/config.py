"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
import socket
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.mailgun.net/v3"

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


def _default_sender() -> str:
    return "winston@" + socket.gethostname()


@dataclass(frozen=True)
class NotifierConfig:
    recipient: str | tuple[str, ...] = ""
    api_key: str = ""
    domain: str = ""
    sender: str = field(default_factory=_default_sender)
    level: str = "info"
    silent: bool = False
    subject: str | None = None
    handle_exceptions: bool = False
    proxy: str | None = None
    timeout: float | None = None
    base_url: str = DEFAULT_BASE_URL


@dataclass(frozen=True)
class AppConfig:
    log_level: str = "INFO"
    mailgun: NotifierConfig = field(default_factory=NotifierConfig)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# Option builders
# ---------------------------------------------------------------------------

# camelCase option names accepted alongside the snake_case ones.
_ALIASES = {
    "to": "recipient",
    "from": "sender",
    "apiKey": "api_key",
    "handleExceptions": "handle_exceptions",
    "baseUrl": "base_url",
}


def _normalize_keys(raw: Mapping[str, Any]) -> dict[str, Any]:
    return {_ALIASES.get(key, key): value for key, value in raw.items()}


def _recipient(value: Any) -> str | tuple[str, ...]:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value if v)
    return str(value)


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def build_notifier_config(raw: Mapping[str, Any] | None) -> NotifierConfig:
    """Build a :class:`NotifierConfig` from an options mapping.

    Accepts the snake_case field names as well as ``to``, ``from``,
    ``apiKey`` and ``handleExceptions``. Empty values fall back to the
    field defaults; required fields are checked by
    :func:`validate_notifier_config`, not here.
    """
    opts = _normalize_keys(raw or {})
    return NotifierConfig(
        recipient=_recipient(opts.get("recipient")),
        api_key=str(opts.get("api_key") or ""),
        domain=str(opts.get("domain") or ""),
        sender=str(opts.get("sender") or _default_sender()),
        level=str(opts.get("level") or "info"),
        silent=_as_bool(opts.get("silent", False)),
        subject=opts.get("subject"),
        handle_exceptions=_as_bool(opts.get("handle_exceptions", False)),
        proxy=opts.get("proxy") or None,
        timeout=_optional_float(opts.get("timeout")),
        base_url=str(opts.get("base_url") or DEFAULT_BASE_URL).rstrip("/"),
    )


def validate_notifier_config(cfg: NotifierConfig) -> None:
    """Raise :class:`ConfigurationError` for the first missing required field."""
    if not cfg.recipient:
        raise ConfigurationError("recipient required")
    if not cfg.api_key:
        raise ConfigurationError("api credential required")
    if not cfg.domain:
        raise ConfigurationError("api domain required")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate transport configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            current working directory.
    """
    load_dotenv()

    if config_path is None:
        config_path = Path.cwd() / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        log_level=str(raw.get("log_level", "INFO")),
        mailgun=build_notifier_config(raw.get("mailgun", {})),
    )

    validate_notifier_config(cfg.mailgun)
    logger.info("Configuration loaded from %s", config_path)
    return cfg
