"""FastAPI endpoints for the Catalogue domain."""

import json

from fastapi import APIRouter, Depends, Query
from protean.utils.globals import current_domain

from catalogue.api.schemas import (
    AddProductRequest,
    ProductIdResponse,
    ProductListResponse,
    ProductResponse,
    RateProductRequest,
    RatingSummaryResponse,
    StatusResponse,
    UpdateProductRequest,
)
from catalogue.product.listing import ProductQuery, get_product, list_products
from catalogue.product.management import AddProduct, RateProduct, RemoveProduct, UpdateProduct
from identity.auth import Identity, get_current_identity
from shared.config import settings

product_router = APIRouter(prefix="/products", tags=["products"])


def _json_or_none(value):
    return json.dumps(value) if value is not None else None


@product_router.get("", response_model=ProductListResponse)
async def search_products(
    category: str | None = None,
    search: str | None = None,
    sort: str | None = None,
    page: int = Query(1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE),
) -> ProductListResponse:
    result = list_products(ProductQuery(category=category, search=search, sort=sort, page=page, page_size=limit))
    return ProductListResponse(
        products=[ProductResponse(**product.to_dict_view()) for product in result.items],
        total_pages=result.total_pages,
        current_page=result.current_page,
        total=result.total,
    )


@product_router.get("/{product_id}", response_model=ProductResponse)
async def product_details(product_id: str) -> ProductResponse:
    return ProductResponse(**get_product(product_id).to_dict_view())


@product_router.post("", status_code=201, response_model=ProductIdResponse)
async def add_product(
    body: AddProductRequest,
    caller: Identity = Depends(get_current_identity),
) -> ProductIdResponse:
    command = AddProduct(
        name=body.name,
        description=body.description,
        price=body.price,
        category=body.category,
        stock=body.stock,
        images=json.dumps(body.images),
        features=json.dumps(body.features),
        specifications=json.dumps(body.specifications),
        discount_percentage=body.discount_percentage,
        discount_valid_until=body.discount_valid_until,
    )
    result = current_domain.process(command, asynchronous=False)
    return ProductIdResponse(product_id=result)


@product_router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    body: UpdateProductRequest,
    caller: Identity = Depends(get_current_identity),
) -> ProductResponse:
    command = UpdateProduct(
        product_id=product_id,
        name=body.name,
        description=body.description,
        price=body.price,
        category=body.category,
        stock=body.stock,
        images=_json_or_none(body.images),
        features=_json_or_none(body.features),
        specifications=_json_or_none(body.specifications),
        discount_percentage=body.discount_percentage,
        discount_valid_until=body.discount_valid_until,
    )
    current_domain.process(command, asynchronous=False)
    return ProductResponse(**get_product(product_id).to_dict_view())


@product_router.delete("/{product_id}", response_model=StatusResponse)
async def remove_product(
    product_id: str,
    caller: Identity = Depends(get_current_identity),
) -> StatusResponse:
    current_domain.process(RemoveProduct(product_id=product_id), asynchronous=False)
    return StatusResponse(status="removed")


@product_router.post("/{product_id}/ratings", status_code=201, response_model=RatingSummaryResponse)
async def rate_product(
    product_id: str,
    body: RateProductRequest,
    caller: Identity = Depends(get_current_identity),
) -> RatingSummaryResponse:
    command = RateProduct(
        product_id=product_id,
        user_id=caller.user_id,
        rating=body.rating,
        review=body.review,
    )
    average = current_domain.process(command, asynchronous=False)
    return RatingSummaryResponse(product_id=product_id, average_rating=average)
