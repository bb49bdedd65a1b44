"""Product aggregate root with its Rating entity and Discount value object."""

import json
from datetime import UTC, datetime
from decimal import Decimal

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from catalogue.domain import catalogue
from catalogue.product.events import ProductAdded, ProductDetailsUpdated, ProductRated

# Fields a product update may touch, in the order they are reported.
UPDATABLE_FIELDS = (
    "name",
    "description",
    "price",
    "category",
    "images",
    "stock",
    "features",
    "specifications",
)


@catalogue.value_object(part_of="Product")
class Discount:
    """A percentage reduction that applies until ``valid_until``."""

    percentage: Float(required=True, min_value=0.0, max_value=100.0)
    valid_until: DateTime()

    def is_active(self, at=None) -> bool:
        if self.valid_until is None:
            return True
        valid_until = self.valid_until
        if valid_until.tzinfo is None:
            valid_until = valid_until.replace(tzinfo=UTC)
        return (at or datetime.now(UTC)) <= valid_until


@catalogue.entity(part_of="Product")
class Rating:
    user_id: Identifier(required=True)
    rating: Integer(required=True, min_value=1, max_value=5)
    review: String(max_length=2000)
    created_at: DateTime()


@catalogue.aggregate
class Product:
    name: String(required=True, max_length=200)
    description: Text(required=True)
    price: Float(required=True, min_value=0.0)
    category: String(required=True, max_length=100)
    images: Text()  # JSON array of URLs
    stock: Integer(default=0, min_value=0)
    features: Text()  # JSON array of strings
    specifications: Text()  # JSON object
    discount: ValueObject(Discount)
    ratings: HasMany(Rating)
    average_rating: Float(default=0.0)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def json_fields_must_have_expected_shape(self):
        for field_name, expected in (("images", list), ("features", list), ("specifications", dict)):
            raw = getattr(self, field_name)
            if raw is None:
                continue
            try:
                value = json.loads(raw)
            except (TypeError, ValueError) as exc:
                raise ValidationError({field_name: ["Must be valid JSON"]}) from exc
            if not isinstance(value, expected):
                raise ValidationError({field_name: [f"Must be a JSON {expected.__name__}"]})

    @classmethod
    def create(
        cls,
        name,
        description,
        price,
        category,
        stock=0,
        images=None,
        features=None,
        specifications=None,
        discount=None,
    ):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            description=description,
            price=price,
            category=category,
            stock=stock or 0,
            images=json.dumps(images or []),
            features=json.dumps(features or []),
            specifications=json.dumps(specifications or {}),
            discount=discount,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=product.name,
                category=product.category,
                price=product.price,
                stock=product.stock,
                created_at=now,
            )
        )
        return product

    def update(self, **changes):
        """Apply a partial update. Keys with a ``None`` value are left alone."""
        unknown = set(changes) - set(UPDATABLE_FIELDS) - {"discount"}
        if unknown:
            raise ValidationError({"product": [f"Unknown fields: {', '.join(sorted(unknown))}"]})

        changed = []
        for field_name in UPDATABLE_FIELDS:
            value = changes.get(field_name)
            if value is None:
                continue
            if field_name in ("images", "features", "specifications"):
                value = json.dumps(value)
            setattr(self, field_name, value)
            changed.append(field_name)

        if changes.get("discount") is not None:
            self.discount = changes["discount"]
            changed.append("discount")

        if not changed:
            return

        self.updated_at = datetime.now(UTC)
        self.raise_(
            ProductDetailsUpdated(
                product_id=str(self.id),
                changed_fields=",".join(changed),
                price=self.price,
                stock=self.stock,
            )
        )

    def rate(self, user_id, rating, review=None):
        """Record a rating. A user's second rating replaces their first."""
        existing = next((r for r in self.ratings if str(r.user_id) == str(user_id)), None)
        if existing is not None:
            self.remove_ratings(existing)
        self.add_ratings(
            Rating(
                user_id=str(user_id),
                rating=rating,
                review=review,
                created_at=datetime.now(UTC),
            )
        )

        total = sum(Decimal(r.rating) for r in self.ratings)
        self.average_rating = float(round(total / len(self.ratings), 2))
        self.updated_at = datetime.now(UTC)
        self.raise_(
            ProductRated(
                product_id=str(self.id),
                user_id=str(user_id),
                rating=rating,
                average_rating=self.average_rating,
            )
        )

    @property
    def effective_price(self) -> float:
        if self.discount is None or not self.discount.is_active():
            return self.price
        factor = (Decimal(100) - Decimal(str(self.discount.percentage))) / Decimal(100)
        return float((Decimal(str(self.price)) * factor).quantize(Decimal("0.01")))

    def to_dict_view(self) -> dict:
        """Plain representation used by the API and the listing service."""
        return {
            "id": str(self.id),
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "effective_price": self.effective_price,
            "category": self.category,
            "images": json.loads(self.images) if self.images else [],
            "stock": self.stock,
            "features": json.loads(self.features) if self.features else [],
            "specifications": json.loads(self.specifications) if self.specifications else {},
            "discount": (
                {
                    "percentage": self.discount.percentage,
                    "valid_until": self.discount.valid_until.isoformat() if self.discount.valid_until else None,
                }
                if self.discount
                else None
            ),
            "ratings": [
                {"user_id": str(r.user_id), "rating": r.rating, "review": r.review} for r in self.ratings
            ],
            "average_rating": self.average_rating,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
