"""Tests for the Product aggregate."""

import json
from datetime import UTC, datetime, timedelta

import pytest
from catalogue.product.events import ProductAdded, ProductDetailsUpdated, ProductRated
from catalogue.product.product import Discount, Product
from protean.exceptions import ValidationError


def _product(**overrides):
    defaults = {
        "name": "Trail Shoe",
        "description": "Grippy and light",
        "price": 80.0,
        "category": "footwear",
        "stock": 5,
        "images": ["https://cdn.example.com/1.jpg"],
        "features": ["waterproof"],
        "specifications": {"weight": "280g"},
    }
    defaults.update(overrides)
    return Product.create(**defaults)


class TestCreate:
    def test_json_fields_are_stored(self):
        product = _product()
        assert json.loads(product.images) == ["https://cdn.example.com/1.jpg"]
        assert json.loads(product.specifications) == {"weight": "280g"}

    def test_raises_product_added(self):
        product = _product()
        event = next(e for e in product._events if isinstance(e, ProductAdded))
        assert event.product_id == str(product.id)
        assert event.price == 80.0

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            _product(price=-1)

    def test_negative_stock_rejected(self):
        with pytest.raises(ValidationError):
            _product(stock=-1)

    def test_specifications_must_be_an_object(self):
        with pytest.raises(ValidationError):
            Product(name="X", description="Y", price=1.0, category="c", specifications=json.dumps(["a"]))


class TestUpdate:
    def test_partial_update(self):
        product = _product()
        product.update(price=70.0, features=["vegan"])
        assert product.price == 70.0
        assert json.loads(product.features) == ["vegan"]
        assert product.name == "Trail Shoe"

    def test_raises_event_with_changed_fields(self):
        product = _product()
        product.update(stock=9)
        event = next(e for e in product._events if isinstance(e, ProductDetailsUpdated))
        assert event.changed_fields == "stock"
        assert event.stock == 9

    def test_no_changes_raises_no_event(self):
        product = _product()
        product.update()
        assert not [e for e in product._events if isinstance(e, ProductDetailsUpdated)]


class TestRatings:
    def test_average(self):
        product = _product()
        product.rate("u1", 5)
        product.rate("u2", 4)
        assert product.average_rating == 4.5
        assert len(product.ratings) == 2

    def test_second_rating_from_same_user_replaces_first(self):
        product = _product()
        product.rate("u1", 1)
        product.rate("u1", 5, "changed my mind")
        assert len(product.ratings) == 1
        assert product.average_rating == 5.0

    def test_event(self):
        product = _product()
        product.rate("u1", 3)
        event = next(e for e in product._events if isinstance(e, ProductRated))
        assert event.rating == 3
        assert event.average_rating == 3.0

    @pytest.mark.parametrize("rating", [0, 6])
    def test_out_of_range(self, rating):
        with pytest.raises(ValidationError):
            _product().rate("u1", rating)


class TestDiscount:
    def test_active_discount_reduces_price(self):
        product = _product(
            price=80.0,
            discount=Discount(percentage=25.0, valid_until=datetime.now(UTC) + timedelta(days=1)),
        )
        assert product.effective_price == 60.0

    def test_expired_discount_is_ignored(self):
        product = _product(
            price=80.0,
            discount=Discount(percentage=25.0, valid_until=datetime.now(UTC) - timedelta(days=1)),
        )
        assert product.effective_price == 80.0

    def test_no_discount(self):
        assert _product().effective_price == 80.0
