"""Fake email adapter: keeps outgoing mail in memory."""

from uuid import uuid4

from storefront.notifications.channel.email_port import DeliveryResult, EmailMessage, EmailPort


class FakeEmailAdapter(EmailPort):
    """Email adapter that records messages instead of delivering them.

    ``configure(should_succeed=False)`` makes every send report a failure and
    ``raise_on_send=True`` makes it raise, which is how callers' best-effort
    handling gets exercised in tests.
    """

    def __init__(self):
        self.outbox: list[EmailMessage] = []
        self.should_succeed = True
        self.raise_on_send = False
        self.failure_reason = "Email delivery failed"

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Email delivery failed",
        raise_on_send: bool = False,
    ):
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.raise_on_send = raise_on_send

    def send(self, message: EmailMessage) -> DeliveryResult:
        if self.raise_on_send:
            raise ConnectionError(self.failure_reason)
        if not self.should_succeed:
            return DeliveryResult(delivered=False, error=self.failure_reason)

        self.outbox.append(message)
        return DeliveryResult(delivered=True, message_id=f"email-{uuid4().hex[:12]}")

    def sent_to(self, address: str) -> list[EmailMessage]:
        return [m for m in self.outbox if m.to == address]

    def reset(self):
        self.outbox.clear()
        self.should_succeed = True
        self.raise_on_send = False
        self.failure_reason = "Email delivery failed"
