"""Customer notifications for order events.

Delivery is best effort: a provider failure is logged and never undoes or
blocks the order write that triggered it.
"""

import structlog

from storefront.notifications.channel import get_email_channel
from storefront.notifications.channel.email_port import EmailMessage
from storefront.notifications.templates.order_confirmation import OrderConfirmationTemplate
from storefront.notifications.templates.order_status import OrderStatusTemplate

logger = structlog.get_logger(__name__)


def _deliver(kind: str, to: str, content: dict, **log_context) -> bool:
    if not to:
        logger.warning("Notification skipped, no recipient", kind=kind, **log_context)
        return False

    message = EmailMessage(
        to=to,
        subject=content["subject"],
        body=content["body"],
        html_body=content.get("html_body"),
    )
    try:
        result = get_email_channel().send(message)
    except Exception as e:
        logger.error("Notification dispatch failed", kind=kind, error=str(e), **log_context)
        return False

    if not result.delivered:
        logger.error("Notification rejected by provider", kind=kind, error=result.error, **log_context)
        return False

    logger.info("Notification sent", kind=kind, message_id=result.message_id, **log_context)
    return True


def notify_status_change(order: dict, previous_status: str) -> bool:
    """Tell the customer their order moved from ``previous_status`` to its current status."""
    content = OrderStatusTemplate.render(
        {
            "order_number": order.get("order_number"),
            "previous_status": previous_status,
            "new_status": order.get("status"),
            "payment_status": order.get("payment_status"),
            "tracking_number": order.get("tracking_number"),
            "notes": order.get("notes"),
        }
    )
    return _deliver("order_status", order.get("customer_email"), content, order_number=order.get("order_number"))


def send_order_confirmation(order: dict) -> bool:
    content = OrderConfirmationTemplate.render(order)
    return _deliver(
        "order_confirmation",
        order.get("customer_email"),
        content,
        order_number=order.get("order_number"),
    )
