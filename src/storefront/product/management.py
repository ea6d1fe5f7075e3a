"""Catalog administration: product creation, publication and availability."""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.product.product import Product, ProductStatus, StockModel
from storefront.shared.guarded import update_where

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class CreateProduct:
    name: String(required=True, max_length=255)
    price: String(required=True, max_length=50)
    original_price: String(max_length=50)
    description: Text()
    category: String(max_length=100)
    stock_model: String(max_length=20, default=StockModel.PER_VARIANT.value)
    variants: Text()  # JSON array of {"name", "stock"}
    in_stock: Boolean(default=False)


@storefront.command(part_of="Product")
class PublishProduct:
    product_id: Identifier(required=True)


@storefront.command(part_of="Product")
class UnpublishProduct:
    product_id: Identifier(required=True)


@storefront.command(part_of="Product")
class SetProductAvailability:
    product_id: Identifier(required=True)
    in_stock: Boolean(required=True)


def _parse_variants(raw):
    if not raw:
        return []
    try:
        variants = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        raise ValidationError({"variants": ["Variants must be a JSON array"]})
    if not isinstance(variants, list) or not all(isinstance(v, dict) for v in variants):
        raise ValidationError({"variants": ["Variants must be a JSON array of objects"]})
    return variants


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        product = Product.create(
            name=command.name,
            price=command.price,
            original_price=command.original_price,
            description=command.description,
            category=command.category,
            stock_model=command.stock_model,
            variants=_parse_variants(command.variants),
            in_stock=command.in_stock,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("Product created", product_id=str(product.id), stock_model=product.stock_model)
        return str(product.id)

    # Publication and availability are written field by field. Stock, rating
    # and per-variant counters belong to other writers and are never rewritten
    # from a copy loaded here.

    @handle(PublishProduct)
    def publish_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get_or_raise(command.product_id)
        product.publish()
        self._transition(repo, product, ProductStatus.DRAFT.value, "Product is already published")

    @handle(UnpublishProduct)
    def unpublish_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get_or_raise(command.product_id)
        product.unpublish()
        self._transition(repo, product, ProductStatus.PUBLISHED.value, "Product is not published")

    @handle(SetProductAvailability)
    def set_availability(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get_or_raise(command.product_id)
        product.set_availability(command.in_stock)

        update_where(
            repo._dao,
            {"id": str(product.id), "stock_model": StockModel.BOOLEAN.value},
            in_stock=product.in_stock,
            updated_at=product.updated_at,
        )
        logger.info("Product availability set", product_id=str(product.id), in_stock=product.in_stock)

    def _transition(self, repo, product, from_status, conflict_message):
        matched = update_where(
            repo._dao,
            {"id": str(product.id), "status": from_status},
            status=product.status,
            updated_at=product.updated_at,
        )
        if not matched:
            raise ValidationError({"status": [conflict_message]})
        logger.info("Product status changed", product_id=str(product.id), status=product.status)
