"""Pydantic schemas shared by the product service and the HTTP API."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from catalog.models import MAX_PRICE, MAX_STOCK


class PhotoOut(BaseModel):
    """Schema for a product photo reference."""

    public_id: str
    url: str

    model_config = ConfigDict(from_attributes=True)


class ProductOut(BaseModel):
    """Schema for a catalog product."""

    id: uuid.UUID
    name: str
    price: float
    stock: int
    category: str
    photo: PhotoOut
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductUpdate(BaseModel):
    """Partial update for a product.

    Only the fields explicitly set by the caller are applied; presence is read
    from ``model_fields_set``, so zero values for ``price`` and ``stock`` count
    as provided.
    """

    name: str | None = Field(default=None, min_length=1)
    price: float | None = Field(default=None, ge=0, le=MAX_PRICE, allow_inf_nan=False)
    stock: int | None = Field(default=None, ge=0, le=MAX_STOCK)
    category: str | None = Field(default=None, min_length=1)

    def provided_fields(self) -> dict[str, Any]:
        """Return the explicitly provided, non-null fields."""
        return {
            field: getattr(self, field)
            for field in self.model_fields_set
            if getattr(self, field) is not None
        }


class SearchResult(BaseModel):
    """One page of filtered products."""

    total_pages: int = Field(description="Number of pages for the current filters")
    filtered_products: list[ProductOut] = Field(default_factory=list)


class ApiResponse(BaseModel):
    """Response envelope for successful requests."""

    success: bool = True
    message: str = ""
    data: Any = None


class ErrorResponse(BaseModel):
    """Response envelope for failed requests."""

    success: bool = False
    message: str
    status_code: int = Field(serialization_alias="statusCode")
