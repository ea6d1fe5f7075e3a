"""Order Number Allocator: ``ORD-YYYYMMDD-NNN`` identifiers, unique across concurrent checkouts.

Each calendar day owns a ``DailyOrderSequence`` counter. Advancing it is a
compare-and-swap on ``last_value``, so two allocators that read the same
value cannot both win. A day's counter is seeded from the number of orders
already placed that day. Every candidate is still probed against stored
order numbers before it is handed out, and ``Order.order_number`` carries a
unique constraint at the storage layer.
"""

import os
from datetime import UTC, datetime, timedelta

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Integer, String
from protean.utils.globals import current_domain
from sqlalchemy.exc import IntegrityError

from storefront.domain import storefront
from storefront.errors import DuplicateOrderNumber
from storefront.order.order import Order
from storefront.shared.guarded import update_where

logger = structlog.get_logger(__name__)

DEFAULT_ATTEMPTS = 10


@storefront.aggregate
class DailyOrderSequence:
    day = String(identifier=True, max_length=8)
    last_value = Integer(default=0, min_value=0)


def day_window(now: datetime) -> tuple[datetime, datetime]:
    """Return ``[midnight, next midnight)`` around ``now``."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return start, start + timedelta(days=1)


def format_order_number(day_start: datetime, sequence: int) -> str:
    return f"ORD-{day_start:%Y%m%d}-{sequence:03d}"


class OrderNumberAllocator:
    def __init__(self, max_attempts: int | None = None):
        if max_attempts is None:
            max_attempts = int(os.getenv("ORDER_NUMBER_ATTEMPTS", DEFAULT_ATTEMPTS))
        self.max_attempts = max_attempts

    @property
    def _sequences(self):
        return current_domain.repository_for(DailyOrderSequence)

    def _read_sequence(self, day: str) -> DailyOrderSequence:
        return self._sequences._dao.get(day)

    def _current(self, day: str, start: datetime, end: datetime) -> int:
        try:
            return self._read_sequence(day).last_value
        except ObjectNotFoundError:
            pass

        seed = current_domain.repository_for(Order).count_placed_between(start, end)
        try:
            self._sequences._dao.create(day=day, last_value=seed)
        except (ValidationError, IntegrityError):
            # Another allocator seeded the day first; continue from its row.
            logger.info("Order sequence already seeded", day=day)
            return self._read_sequence(day).last_value

        logger.debug("Order sequence seeded", day=day, seed=seed)
        return seed

    def _advance(self, day: str, start: datetime, end: datetime) -> int | None:
        observed = self._current(day, start, end)
        matched = update_where(
            self._sequences._dao,
            {"day": day, "last_value": observed},
            last_value=observed + 1,
        )
        return observed + 1 if matched == 1 else None

    def next_order_number(self, now: datetime | None = None) -> str:
        start, end = day_window(now or datetime.now(UTC))
        day = f"{start:%Y%m%d}"
        orders = current_domain.repository_for(Order)

        for attempt in range(1, self.max_attempts + 1):
            value = self._advance(day, start, end)
            if value is None:
                logger.debug("Order sequence contended, retrying", day=day, attempt=attempt)
                continue

            candidate = format_order_number(start, value)
            if not orders.number_taken(candidate):
                return candidate

            logger.warning("Order number already taken, advancing", order_number=candidate, attempt=attempt)

        logger.error("Order number allocation exhausted", day=day, attempts=self.max_attempts)
        raise DuplicateOrderNumber(day, self.max_attempts)


_allocator: OrderNumberAllocator | None = None


def get_allocator() -> OrderNumberAllocator:
    global _allocator
    if _allocator is None:
        _allocator = OrderNumberAllocator()
    return _allocator


def reset_allocator() -> None:
    global _allocator
    _allocator = None
