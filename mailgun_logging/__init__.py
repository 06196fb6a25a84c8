"""Logging transport that mails log events through the Mailgun API."""
from .client import MailgunClient
from .config import NotifierConfig, build_notifier_config, load_config
from .errors import ConfigurationError, DeliveryError
from .handler import MailgunHandler, build_handler, install_exception_hook
from .models import Attachment, LogEvent, MessageRequest
from .notifications import MailgunNotifier

__all__ = [
    "Attachment",
    "ConfigurationError",
    "DeliveryError",
    "LogEvent",
    "MailgunClient",
    "MailgunHandler",
    "MailgunNotifier",
    "MessageRequest",
    "NotifierConfig",
    "build_handler",
    "build_notifier_config",
    "install_exception_hook",
    "load_config",
]
