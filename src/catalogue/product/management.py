"""Product management: commands and handlers for adding, editing, removing and rating products."""

import json

from protean import handle
from protean.fields import DateTime, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from catalogue.domain import catalogue, logger
from catalogue.product.product import Discount, Product


def _load(raw):
    return json.loads(raw) if isinstance(raw, str) else raw


def _discount(percentage, valid_until):
    if percentage is None:
        return None
    return Discount(percentage=percentage, valid_until=valid_until)


@catalogue.command(part_of="Product")
class AddProduct:
    name: String(required=True, max_length=200)
    description: Text(required=True)
    price: Float(required=True, min_value=0.0)
    category: String(required=True, max_length=100)
    stock: Integer(default=0, min_value=0)
    images: Text()  # JSON array of URLs
    features: Text()  # JSON array of strings
    specifications: Text()  # JSON object
    discount_percentage: Float(min_value=0.0, max_value=100.0)
    discount_valid_until: DateTime()


@catalogue.command(part_of="Product")
class UpdateProduct:
    product_id: Identifier(required=True)
    name: String(max_length=200)
    description: Text()
    price: Float(min_value=0.0)
    category: String(max_length=100)
    stock: Integer(min_value=0)
    images: Text()
    features: Text()
    specifications: Text()
    discount_percentage: Float(min_value=0.0, max_value=100.0)
    discount_valid_until: DateTime()


@catalogue.command(part_of="Product")
class RemoveProduct:
    product_id: Identifier(required=True)


@catalogue.command(part_of="Product")
class RateProduct:
    product_id: Identifier(required=True)
    user_id: Identifier(required=True)
    rating: Integer(required=True, min_value=1, max_value=5)
    review: String(max_length=2000)


@catalogue.command_handler(part_of=Product)
class ProductManagementHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.create(
            name=command.name,
            description=command.description,
            price=command.price,
            category=command.category,
            stock=command.stock,
            images=_load(command.images),
            features=_load(command.features),
            specifications=_load(command.specifications),
            discount=_discount(command.discount_percentage, command.discount_valid_until),
        )
        current_domain.repository_for(Product).add(product)
        logger.info("product_added", product_id=str(product.id), category=product.category)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.update(
            name=command.name,
            description=command.description,
            price=command.price,
            category=command.category,
            stock=command.stock,
            images=_load(command.images),
            features=_load(command.features),
            specifications=_load(command.specifications),
            discount=_discount(command.discount_percentage, command.discount_valid_until),
        )
        repo.add(product)
        return str(product.id)

    @handle(RemoveProduct)
    def remove_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        repo._dao.delete(product)
        logger.info("product_removed", product_id=str(command.product_id))

    @handle(RateProduct)
    def rate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.rate(command.user_id, command.rating, command.review)
        repo.add(product)
        return product.average_rating
