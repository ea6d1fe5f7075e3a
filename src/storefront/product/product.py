"""Product aggregate root with Variant entities.

A product tracks stock in one of two ways, recorded in ``stock_model``:

* ``per_variant``: each Variant carries its own counter and the product's
  ``in_stock`` flag is derived from them.
* ``boolean``: there are no variants and ``in_stock`` is set directly.

Stock counters are never written through this aggregate once the product
exists. All decrements and restocks go through ``storefront.inventory.ledger``.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Integer, String, Text

from storefront.domain import storefront


class ProductStatus(Enum):
    DRAFT = "draft"
    PUBLISHED = "published"


class StockModel(Enum):
    PER_VARIANT = "per_variant"
    BOOLEAN = "boolean"


@storefront.entity(part_of="Product")
class Variant:
    """A purchasable option of a product (a colour, a size) with its own stock."""

    name: String(required=True, max_length=100)
    stock: Integer(default=0, min_value=0)
    in_stock: Boolean(default=False)


@storefront.aggregate
class Product:
    """Product aggregate root."""

    name: String(required=True, max_length=255)
    description: Text()
    category: String(max_length=100)
    price: String(required=True, max_length=50)
    original_price: String(max_length=50)
    status: String(choices=ProductStatus, default=ProductStatus.DRAFT.value)
    stock_model: String(choices=StockModel, default=StockModel.PER_VARIANT.value)
    in_stock: Boolean(default=False)
    variants: HasMany(Variant)
    rating: Float(default=0.0)
    review_count: Integer(default=0)
    created_at: DateTime(default=lambda: datetime.now(UTC))
    updated_at: DateTime(default=lambda: datetime.now(UTC))

    @classmethod
    def create(
        cls,
        name,
        price,
        stock_model=StockModel.PER_VARIANT.value,
        variants=None,
        in_stock=False,
        description=None,
        category=None,
        original_price=None,
    ):
        from storefront.product.events import ProductCreated

        variants = variants or []
        _validate_stock_model(stock_model, variants)

        now = datetime.now(UTC)
        variant_entities = [
            Variant(name=v["name"], stock=int(v.get("stock", 0)), in_stock=int(v.get("stock", 0)) > 0)
            for v in variants
        ]
        if stock_model == StockModel.PER_VARIANT.value:
            in_stock = any(v.in_stock for v in variant_entities)

        product = cls(
            name=name,
            price=price,
            original_price=original_price,
            description=description,
            category=category,
            stock_model=stock_model,
            in_stock=bool(in_stock),
            variants=variant_entities,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=product.id,
                name=name,
                stock_model=stock_model,
                variant_count=len(variant_entities),
                created_at=now,
            )
        )
        return product

    @property
    def is_published(self) -> bool:
        return self.status == ProductStatus.PUBLISHED.value

    @property
    def tracks_variants(self) -> bool:
        return self.stock_model == StockModel.PER_VARIANT.value

    @property
    def total_stock(self) -> int:
        return sum(v.stock or 0 for v in self.variants)

    def variant_named(self, name):
        return next((v for v in self.variants if v.name == name), None)

    def publish(self):
        from storefront.product.events import ProductPublished

        if self.is_published:
            raise ValidationError({"status": ["Product is already published"]})

        self.status = ProductStatus.PUBLISHED.value
        self.updated_at = datetime.now(UTC)
        self.raise_(ProductPublished(product_id=self.id, published_at=self.updated_at))

    def unpublish(self):
        from storefront.product.events import ProductUnpublished

        if not self.is_published:
            raise ValidationError({"status": ["Product is not published"]})

        self.status = ProductStatus.DRAFT.value
        self.updated_at = datetime.now(UTC)
        self.raise_(ProductUnpublished(product_id=self.id, unpublished_at=self.updated_at))

    def set_availability(self, in_stock: bool):
        """Toggle availability of a product that has no variant counters."""
        if self.tracks_variants:
            raise ValidationError({"in_stock": ["Availability of a per-variant product is derived from its variants"]})

        self.in_stock = in_stock
        self.updated_at = datetime.now(UTC)


def _validate_stock_model(stock_model, variants):
    if stock_model not in {m.value for m in StockModel}:
        raise ValidationError({"stock_model": [f"Unknown stock model '{stock_model}'"]})

    if stock_model == StockModel.BOOLEAN.value:
        if variants:
            raise ValidationError({"variants": ["Products without variant stock cannot declare variants"]})
        return

    if not variants:
        raise ValidationError({"variants": ["Product must have at least one variant"]})

    names = [v.get("name") for v in variants]
    if any(not n for n in names):
        raise ValidationError({"variants": ["Every variant needs a name"]})
    if len(set(names)) != len(names):
        raise ValidationError({"variants": ["Variant names must be unique"]})
    if any(int(v.get("stock", 0)) < 0 for v in variants):
        raise ValidationError({"variants": ["Variant stock cannot be negative"]})
