"""Inventory Ledger: per-variant stock counters with guarded updates.

Every stock mutation is a single conditional update on the variant row::

    UPDATE variant SET stock = :observed - :qty, in_stock = ...
     WHERE id = :variant_id AND stock = :observed

Zero matched rows means another writer moved the counter after we read it.
We re-read and try again, up to ``max_attempts`` times. A decrement that
cannot be fully satisfied is rejected with ``InsufficientStock``. It is never
applied partially and never clamped to zero.

After each successful write the product's ``in_stock`` flag is recomputed
from freshly read variant rows and written as a field-level update, so
concurrent catalog reads never see a stale whole-document overwrite.
"""

import os
from datetime import UTC, datetime

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.errors import ConflictError, InsufficientStock, VariantNotFound
from storefront.product.product import Product, Variant
from storefront.shared.guarded import update_where

logger = structlog.get_logger(__name__)

DEFAULT_CAS_ATTEMPTS = 5


def _positive_quantity(quantity) -> int:
    if quantity is None or isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError({"quantity": ["Quantity must be a positive integer"]})
    return quantity


class InventoryLedger:
    def __init__(self, max_attempts: int | None = None):
        if max_attempts is None:
            max_attempts = int(os.getenv("INVENTORY_CAS_ATTEMPTS", DEFAULT_CAS_ATTEMPTS))
        self.max_attempts = max_attempts

    # -------------------------------------------------------------------
    # Storage access
    # -------------------------------------------------------------------
    @property
    def _products(self):
        return current_domain.repository_for(Product)

    @property
    def _variant_dao(self):
        return current_domain.repository_for(Variant)._dao

    def _locate(self, product_id, variant):
        product = self._products.get_or_raise(product_id)
        if not product.tracks_variants:
            raise VariantNotFound(product_id, variant)

        entity = product.variant_named(variant)
        if entity is None:
            raise VariantNotFound(product_id, variant)
        return product, entity

    def _read_variant(self, variant_id) -> Variant:
        """Fresh read of a single variant row, bypassing the loaded aggregate."""
        return self._variant_dao.get(variant_id)

    def _swap(self, variant_id, observed: int, new_stock: int) -> bool:
        matched = update_where(
            self._variant_dao,
            {"id": variant_id, "stock": observed},
            stock=new_stock,
            in_stock=new_stock > 0,
        )
        return matched == 1

    def _refresh_product(self, product: Product) -> tuple[int, bool]:
        stocks = [self._read_variant(v.id).stock or 0 for v in product.variants]
        aggregate_stock = sum(stocks)
        in_stock = any(s > 0 for s in stocks)

        update_where(
            self._products._dao,
            {"id": str(product.id)},
            in_stock=in_stock,
            updated_at=datetime.now(UTC),
        )
        return aggregate_stock, in_stock

    # -------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------
    def check_availability(self, product_id, variant) -> dict:
        _, entity = self._locate(product_id, variant)
        current = self._read_variant(entity.id)
        stock = current.stock or 0
        return {"available": stock, "is_in_stock": bool(current.in_stock) and stock > 0}

    def decrement(self, product_id, variant, quantity) -> dict:
        """Atomically take ``quantity`` units of ``variant`` out of stock."""
        quantity = _positive_quantity(quantity)
        product, entity = self._locate(product_id, variant)

        for attempt in range(1, self.max_attempts + 1):
            observed = self._read_variant(entity.id).stock or 0
            if observed < quantity:
                logger.info(
                    "Decrement rejected",
                    product_id=str(product_id),
                    variant=variant,
                    requested=quantity,
                    available=observed,
                )
                raise InsufficientStock(product_id, variant, requested=quantity, available=observed)

            remaining = observed - quantity
            if self._swap(entity.id, observed, remaining):
                return self._result(product, entity, remaining, "Stock decremented", quantity)

            logger.debug("Stock moved during decrement, retrying", product_id=str(product_id), attempt=attempt)

        raise ConflictError(
            "Stock is changing too quickly, please retry",
            product_id=str(product_id),
            variant=variant,
        )

    def restock(self, product_id, variant, quantity) -> dict:
        """Atomically put ``quantity`` units back (admin restock or compensation)."""
        quantity = _positive_quantity(quantity)
        product, entity = self._locate(product_id, variant)

        for attempt in range(1, self.max_attempts + 1):
            observed = self._read_variant(entity.id).stock or 0
            new_stock = observed + quantity
            if self._swap(entity.id, observed, new_stock):
                return self._result(product, entity, new_stock, "Stock replenished", quantity)

            logger.debug("Stock moved during restock, retrying", product_id=str(product_id), attempt=attempt)

        raise ConflictError(
            "Stock is changing too quickly, please retry",
            product_id=str(product_id),
            variant=variant,
        )

    def _result(self, product, entity, stock, message, quantity) -> dict:
        aggregate_stock, in_stock = self._refresh_product(product)
        logger.info(
            message,
            product_id=str(product.id),
            variant=entity.name,
            quantity=quantity,
            remaining=stock,
            aggregate_stock=aggregate_stock,
        )
        return {
            "updated_variant": {"name": entity.name, "stock": stock, "in_stock": stock > 0},
            "remaining": stock,
            "aggregate_stock": aggregate_stock,
            "in_stock": in_stock,
        }


_ledger: InventoryLedger | None = None


def get_ledger() -> InventoryLedger:
    global _ledger
    if _ledger is None:
        _ledger = InventoryLedger()
    return _ledger


def reset_ledger() -> None:
    global _ledger
    _ledger = None
