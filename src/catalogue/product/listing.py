"""Catalogue queries: filtered, sorted and paginated product listings.

Filtering and ordering happen in the repository so only the requested page is
materialised. ``category`` is an exact match; ``search`` is a
case-insensitive substring match against name OR description. Results are
always tie-broken by id so pages are stable.
"""

import math
from dataclasses import dataclass, field

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from protean.utils.query import Q

from catalogue.domain import catalogue
from catalogue.product.product import Product
from shared.config import settings

SORTABLE_FIELDS = frozenset({"name", "price", "category", "stock", "created_at", "average_rating"})
DEFAULT_SORT = "-created_at"


@dataclass(frozen=True)
class ProductQuery:
    category: str | None = None
    search: str | None = None
    sort: str | None = None
    page: int = 1
    page_size: int = 10


@dataclass(frozen=True)
class ProductPage:
    items: list[Product] = field(default_factory=list)
    total_pages: int = 0
    current_page: int = 1
    total: int = 0


def _ordering(sort: str | None) -> list[str]:
    sort = (sort or DEFAULT_SORT).strip()
    descending = sort.startswith("-")
    name = sort[1:] if descending else sort
    if name not in SORTABLE_FIELDS:
        raise ValidationError({"sort": [f"Cannot sort by {sort!r}"]})
    return [f"-{name}" if descending else name, "-id" if descending else "id"]


def _validate(query: ProductQuery) -> int:
    """Check paging arguments and return the effective page size."""
    errors = {}
    if query.page < 1:
        errors["page"] = ["Page must be at least 1"]
    if query.page_size < 1:
        errors["page_size"] = ["Page size must be at least 1"]
    if errors:
        raise ValidationError(errors)
    return min(query.page_size, settings.MAX_PAGE_SIZE)


@catalogue.repository(part_of=Product)
class ProductRepository:
    def search(self, query: ProductQuery):
        page_size = _validate(query)

        queryset = self._dao.query
        if query.category:
            queryset = queryset.filter(category=query.category)
        if query.search:
            term = query.search.strip()
            queryset = queryset.filter(Q(name__icontains=term) | Q(description__icontains=term))

        return (
            queryset.order_by(_ordering(query.sort))
            .offset((query.page - 1) * page_size)
            .limit(page_size)
            .all()
        )


def list_products(query: ProductQuery) -> ProductPage:
    """Return one page of products matching ``query``.

    A page past the end is empty, not an error.
    """
    page_size = _validate(query)
    results = current_domain.repository_for(Product).search(query)

    return ProductPage(
        items=list(results.items),
        total_pages=math.ceil(results.total / page_size),
        current_page=query.page,
        total=results.total,
    )


def get_product(product_id: str) -> Product:
    return current_domain.repository_for(Product).get(product_id)
