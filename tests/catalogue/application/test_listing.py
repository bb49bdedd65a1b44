"""Tests for filtered, sorted and paginated product listings."""

import math

import pytest
from catalogue.product.listing import ProductQuery, list_products
from catalogue.product.product import Product
from protean import current_domain
from protean.exceptions import ValidationError
from shared.config import settings


def _seed(count, category="misc", prefix="Item", price_start=1.0):
    repo = current_domain.repository_for(Product)
    for i in range(count):
        repo.add(
            Product.create(
                name=f"{prefix} {i:02d}",
                description=f"A {category} thing",
                price=price_start + i,
                category=category,
                stock=i,
            )
        )


class TestPagination:
    @pytest.mark.parametrize("count", [0, 1, 5, 6])
    def test_total_pages_is_ceiling(self, count):
        _seed(count)
        page = list_products(ProductQuery(page=1, page_size=5))
        assert page.total == count
        assert page.total_pages == math.ceil(count / 5)

    def test_second_page(self):
        _seed(7)
        page = list_products(ProductQuery(sort="price", page=2, page_size=5))
        assert [p.price for p in page.items] == [6.0, 7.0]
        assert page.current_page == 2

    def test_page_beyond_range_is_empty(self):
        _seed(3)
        page = list_products(ProductQuery(page=4, page_size=5))
        assert page.items == []
        assert page.total_pages == 1
        assert page.current_page == 4

    def test_pages_do_not_overlap(self):
        _seed(9)
        seen = []
        for number in (1, 2, 3):
            seen += [str(p.id) for p in list_products(ProductQuery(sort="name", page=number, page_size=4)).items]
        assert len(seen) == 9
        assert len(set(seen)) == 9

    def test_page_size_capped(self, monkeypatch):
        monkeypatch.setattr(settings, "MAX_PAGE_SIZE", 3)
        _seed(5)
        page = list_products(ProductQuery(page=1, page_size=50))
        assert len(page.items) == 3
        assert page.total_pages == 2

    @pytest.mark.parametrize("page,page_size", [(0, 5), (1, 0), (-1, 5)])
    def test_invalid_paging(self, page, page_size):
        with pytest.raises(ValidationError):
            list_products(ProductQuery(page=page, page_size=page_size))


class TestFilters:
    def test_category_exact(self):
        _seed(2, category="books")
        _seed(3, category="toys")
        page = list_products(ProductQuery(category="books"))
        assert page.total == 2
        assert {p.category for p in page.items} == {"books"}

    def test_search_matches_name_case_insensitively(self):
        _seed(2, prefix="Lamp")
        _seed(2, prefix="Chair")
        page = list_products(ProductQuery(search="lAMp"))
        assert page.total == 2

    def test_search_matches_description(self):
        _seed(2, category="garden")
        _seed(2, category="kitchen")
        page = list_products(ProductQuery(search="GARDEN thing"))
        assert page.total == 2

    def test_filters_combine(self):
        _seed(2, category="books", prefix="Novel")
        _seed(2, category="toys", prefix="Novel")
        page = list_products(ProductQuery(category="toys", search="novel"))
        assert page.total == 2

    def test_no_filters_returns_everything(self):
        _seed(4)
        assert list_products(ProductQuery()).total == 4


class TestSorting:
    def test_ascending_price(self):
        _seed(4, price_start=10.0)
        prices = [p.price for p in list_products(ProductQuery(sort="price")).items]
        assert prices == sorted(prices)

    def test_descending_price(self):
        _seed(4, price_start=10.0)
        prices = [p.price for p in list_products(ProductQuery(sort="-price")).items]
        assert prices == sorted(prices, reverse=True)

    def test_ties_broken_by_id(self):
        repo = current_domain.repository_for(Product)
        for n in range(4):
            repo.add(Product.create(name=f"Same {n}", description="d", price=5.0, category="c"))
        ids = [str(p.id) for p in list_products(ProductQuery(sort="price")).items]
        assert ids == sorted(ids)

    @pytest.mark.parametrize("sort", ["password_hash", "--price", "-", "price,name", "- price"])
    def test_unknown_sort_field(self, sort):
        with pytest.raises(ValidationError) as exc:
            list_products(ProductQuery(sort=sort))
        assert "sort" in exc.value.messages
