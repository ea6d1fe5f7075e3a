"""Order status template: sent when an admin moves an order to a new status."""

from html import escape


def _pretty(value) -> str:
    return str(value or "").replace("_", " ").title()


class OrderStatusTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number") or "N/A"
        previous = context.get("previous_status")
        new_status = context.get("new_status", "")
        payment_status = context.get("payment_status") or "unknown"
        tracking_number = context.get("tracking_number")
        notes = context.get("notes")

        if previous:
            change_line = f"Status changed from {_pretty(previous)} to {_pretty(new_status)}."
        else:
            change_line = f"Current status: {_pretty(new_status)}."

        lines = [f"Order update for {order_number}", "", change_line, f"Payment status: {_pretty(payment_status)}"]
        html = [
            f"<h2>Order Update: <span>{escape(order_number)}</span></h2>",
            f"<p>{escape(change_line)}</p>",
            f"<p>Payment Status: <strong>{escape(_pretty(payment_status))}</strong></p>",
        ]

        if tracking_number:
            lines.append(f"Tracking number: {tracking_number}")
            html.append(f"<p>Tracking Number: <strong>{escape(tracking_number)}</strong></p>")
        if notes:
            lines.append(f"Notes: {notes}")
            html.append(f"<p>Notes: <strong>{escape(notes)}</strong></p>")

        return {
            "subject": f"Your order {order_number} is now {_pretty(new_status)}",
            "body": "\n".join(lines),
            "html_body": "<div>" + "".join(html) + "</div>",
        }
