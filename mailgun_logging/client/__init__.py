"""Email delivery clients."""
from .mailgun import MailgunClient

__all__ = ["MailgunClient"]
