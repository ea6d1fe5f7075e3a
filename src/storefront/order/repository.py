"""Repository for the Order aggregate."""

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.errors import OrderNotFound
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def find(self, order_id) -> Order | None:
        if not order_id:
            return None
        try:
            return self.get(str(order_id))
        except ObjectNotFoundError:
            return None

    def get_or_raise(self, order_id) -> Order:
        order = self.find(order_id)
        if order is None:
            raise OrderNotFound(order_id)
        return order

    def reload(self, order_id) -> Order:
        """Read the stored row, skipping any copy already loaded in this unit of work."""
        try:
            return self._dao.get(str(order_id))
        except ObjectNotFoundError:
            raise OrderNotFound(order_id)

    def number_taken(self, order_number: str) -> bool:
        return self._dao.query.filter(order_number=order_number).all().total > 0

    def count_placed_between(self, start, end) -> int:
        return self._dao.query.filter(order_date__gte=start, order_date__lt=end).all().total

    def for_customer(self, customer_id, status=None) -> list[Order]:
        criteria = {"customer_id": str(customer_id)}
        if status:
            criteria["status"] = status
        return self._dao.query.filter(**criteria).order_by("-order_date").all().items

    def search(self, status=None, payment_status=None, start=None, end=None) -> list[Order]:
        criteria = {}
        if status:
            criteria["status"] = status
        if payment_status:
            criteria["payment_status"] = payment_status
        if start:
            criteria["order_date__gte"] = start
        if end:
            criteria["order_date__lte"] = end

        query = self._dao.query
        if criteria:
            query = query.filter(**criteria)
        return query.order_by("-order_date").all().items
