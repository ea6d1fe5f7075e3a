"""Email channel port (abstract interface).

The storefront renders messages itself and hands them to whichever delivery
provider is plugged in. FakeEmailAdapter serves development and tests.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class EmailMessage:
    to: str
    subject: str
    body: str
    html_body: str | None = None


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome reported by the delivery provider."""

    delivered: bool
    message_id: str | None = None
    error: str | None = None


class EmailPort(ABC):
    @abstractmethod
    def send(self, message: EmailMessage) -> DeliveryResult:
        """Hand one message to the provider. Provider outages may raise."""
        ...
