"""Pydantic request/response schemas for the Catalogue API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class AddProductRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Trail Running Shoe",
                    "description": "Lightweight shoe with a grippy outsole.",
                    "price": 89.99,
                    "category": "footwear",
                    "stock": 25,
                    "images": ["https://cdn.example.com/shoe-1.jpg"],
                    "features": ["waterproof", "vegan"],
                    "specifications": {"weight": "280g", "drop": "6mm"},
                    "discount_percentage": 10,
                    "discount_valid_until": "2030-01-01T00:00:00Z",
                }
            ]
        }
    }

    name: str = Field(..., max_length=200)
    description: str
    price: float = Field(..., ge=0)
    category: str = Field(..., max_length=100)
    stock: int = Field(0, ge=0)
    images: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    specifications: dict = Field(default_factory=dict)
    discount_percentage: float | None = Field(None, ge=0, le=100)
    discount_valid_until: datetime | None = None


class UpdateProductRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"price": 79.99, "stock": 40}]}}

    name: str | None = Field(None, max_length=200)
    description: str | None = None
    price: float | None = Field(None, ge=0)
    category: str | None = Field(None, max_length=100)
    stock: int | None = Field(None, ge=0)
    images: list[str] | None = None
    features: list[str] | None = None
    specifications: dict | None = None
    discount_percentage: float | None = Field(None, ge=0, le=100)
    discount_valid_until: datetime | None = None


class RateProductRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"rating": 5, "review": "Fits perfectly."}]}}

    rating: int = Field(..., ge=1, le=5)
    review: str | None = Field(None, max_length=2000)


class DiscountResponse(BaseModel):
    percentage: float
    valid_until: str | None = None


class RatingResponse(BaseModel):
    user_id: str
    rating: int
    review: str | None = None


class ProductResponse(BaseModel):
    id: str
    name: str
    description: str
    price: float
    effective_price: float
    category: str
    images: list[str] = Field(default_factory=list)
    stock: int = 0
    features: list[str] = Field(default_factory=list)
    specifications: dict = Field(default_factory=dict)
    discount: DiscountResponse | None = None
    ratings: list[RatingResponse] = Field(default_factory=list)
    average_rating: float = 0.0
    created_at: str | None = None
    updated_at: str | None = None


class ProductListResponse(BaseModel):
    products: list[ProductResponse]
    total_pages: int
    current_page: int
    total: int


class ProductIdResponse(BaseModel):
    product_id: str


class RatingSummaryResponse(BaseModel):
    product_id: str
    average_rating: float


class StatusResponse(BaseModel):
    status: str = "ok"
