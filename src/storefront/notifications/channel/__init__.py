"""Email channel registry.

Provides singleton access to the e-mail adapter. ``EMAIL_ADAPTER`` selects
the implementation; only the in-memory ``fake`` adapter ships with the core,
and deployments plug their provider in with ``set_email_channel``.
"""

import os

from storefront.notifications.channel.email_port import EmailPort

_email_channel: EmailPort | None = None


def get_email_channel() -> EmailPort:
    global _email_channel
    if _email_channel is None:
        adapter = os.getenv("EMAIL_ADAPTER", "fake").lower()
        if adapter == "fake":
            from storefront.notifications.channel.fake_email import FakeEmailAdapter

            _email_channel = FakeEmailAdapter()
        else:
            raise ValueError(f"Unknown email adapter: {adapter}")
    return _email_channel


def set_email_channel(channel: EmailPort) -> None:
    global _email_channel
    _email_channel = channel


def reset_email_channel() -> None:
    """Drop the singleton (useful for testing)."""
    global _email_channel
    _email_channel = None
