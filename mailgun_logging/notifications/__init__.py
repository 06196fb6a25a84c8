"""Notification modules."""
from .mailgun import MailgunNotifier, compose_message, render_metadata

__all__ = ["MailgunNotifier", "compose_message", "render_metadata"]
