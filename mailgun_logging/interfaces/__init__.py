"""Protocol interfaces for the Mailgun logging transport."""
from .mail_client import MailClient
from .transport import Callback, Listener, Transport

__all__ = ["Callback", "Listener", "MailClient", "Transport"]
