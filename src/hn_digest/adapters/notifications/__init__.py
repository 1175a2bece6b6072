"""Digest delivery adapters."""

from hn_digest.adapters.notifications.email_notifier import ResendNotifier
from hn_digest.adapters.notifications.file_notifier import FileNotifier
from hn_digest.config import Settings
from hn_digest.core.errors import ConfigurationError
from hn_digest.core.interfaces import NotificationService


def build_notifier(settings: Settings) -> NotificationService:
    """Create the configured delivery method."""
    method = settings.delivery.method
    if method == "file":
        return FileNotifier(settings.delivery.output_dir)
    if method == "resend":
        return ResendNotifier(settings.resend_api_key)
    raise ConfigurationError(f"Unknown delivery method: {method}. Available: file, resend")


__all__ = ["FileNotifier", "ResendNotifier", "build_notifier"]
