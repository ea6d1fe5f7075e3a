"""Order confirmation template: sent once an order has been placed."""

from html import escape


class OrderConfirmationTemplate:
    @staticmethod
    def render(context: dict) -> dict:
        order_number = context.get("order_number") or "N/A"
        customer_name = context.get("customer_name")
        items = context.get("items", [])
        total = float(context.get("total_amount") or 0)

        greeting = f"Thanks for your order, {customer_name}!" if customer_name else "Thanks for your order!"
        rows = "".join(
            f"<tr><td>{escape(item.get('product_name') or '')}</td>"
            f"<td>{escape(item.get('variant') or '-')}</td>"
            f"<td>{item.get('quantity', 0)}</td>"
            f"<td>{float(item.get('line_total') or 0):.2f}</td></tr>"
            for item in items
        )
        body_lines = [greeting, "", f"We received your order {order_number}."]
        body_lines += [f"- {i.get('product_name')} x{i.get('quantity')}" for i in items]
        body_lines += ["", f"Total: {total:.2f}"]

        return {
            "subject": f"Order {order_number} confirmed",
            "body": "\n".join(body_lines),
            "html_body": (
                f"<h2>{escape(greeting)}</h2>"
                f"<p>We received your order <strong>{escape(order_number)}</strong>.</p>"
                f"<table>{rows}</table>"
                f"<p>Total: <strong>{total:.2f}</strong></p>"
            ),
        }
