"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from catalogue.domain import catalogue


@catalogue.event(part_of="Product")
class ProductAdded:
    """A product was put on sale in the catalogue."""

    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    category: String(required=True)
    price: Float(required=True)
    stock: Integer(required=True)
    created_at: DateTime(required=True)


@catalogue.event(part_of="Product")
class ProductDetailsUpdated:
    """Descriptive data, price or stock of a product changed."""

    __version__ = 1

    product_id: Identifier(required=True)
    changed_fields: String(required=True)  # comma separated
    price: Float(required=True)
    stock: Integer(required=True)


@catalogue.event(part_of="Product")
class ProductRated:
    """A customer rated a product, or replaced their earlier rating."""

    __version__ = 1

    product_id: Identifier(required=True)
    user_id: Identifier(required=True)
    rating: Integer(required=True)
    average_rating: Float(required=True)
