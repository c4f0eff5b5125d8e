"""FastAPI routes for the product catalog."""

import logging
from collections.abc import Callable
from typing import Annotated, Any

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from catalog.cache import ProductCache
from catalog.config import settings
from catalog.errors import CatalogError, ValidationError
from catalog.schemas import ApiResponse, ErrorResponse, ProductUpdate
from catalog.services.media import MediaStoreClient, UploadedImage
from catalog.services.products import ProductService
from catalog.services.store import ProductStore

logger = logging.getLogger(__name__)

# Some clients send this for any file
GENERIC_CONTENT_TYPE = "application/octet-stream"

router = APIRouter(prefix="/api/v1/products", tags=["products"])


def get_cache(request: Request) -> ProductCache:
    """The process-wide cache owned by the application."""
    return request.app.state.cache


def get_product_store() -> ProductStore:
    return ProductStore()


def get_media_client(request: Request) -> MediaStoreClient:
    """The media store client opened by the application lifespan."""
    return request.app.state.media


def get_product_service(
    store: Annotated[ProductStore, Depends(get_product_store)],
    cache: Annotated[ProductCache, Depends(get_cache)],
    media: Annotated[MediaStoreClient, Depends(get_media_client)],
) -> ProductService:
    return ProductService(store=store, cache=cache, media=media)


ServiceDep = Annotated[ProductService, Depends(get_product_service)]


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Render a catalog error as the error envelope."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    body = ErrorResponse(message=exc.message, status_code=exc.status_code)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(by_alias=True))


async def read_photo(photo: UploadFile | None) -> UploadedImage | None:
    """Read and validate an uploaded product photo.

    Args:
        photo: The uploaded file, if any.

    Returns:
        The photo content, or None when no photo was sent.

    Raises:
        ValidationError: If the file is not an image, is empty or is too large.
    """
    if photo is None:
        return None

    content_type = photo.content_type or GENERIC_CONTENT_TYPE
    if content_type != GENERIC_CONTENT_TYPE and not content_type.startswith("image/"):
        raise ValidationError(f"Content type '{content_type}' is not an image")

    contents = await photo.read()
    if len(contents) == 0:
        raise ValidationError("Uploaded photo is empty")
    if len(contents) > settings.max_photo_size:
        raise ValidationError(
            f"Photo size exceeds maximum allowed size of {settings.max_photo_size // (1024 * 1024)}MB"
        )

    return UploadedImage(
        content=contents,
        content_type=content_type,
        filename=photo.filename or "",
    )


def parse_number(value: str | None, field: str, cast: Callable[[str], Any]) -> Any:
    """Convert a form value to a number; blank values count as missing."""
    if value is None or value.strip() == "":
        return None
    try:
        return cast(value)
    except ValueError as e:
        raise ValidationError(f"{field.capitalize()} must be a number") from e


@router.post("/new", response_model=ApiResponse, status_code=201)
async def create_product(
    service: ServiceDep,
    name: Annotated[str | None, Form()] = None,
    price: Annotated[str | None, Form()] = None,
    stock: Annotated[str | None, Form()] = None,
    category: Annotated[str | None, Form()] = None,
    photo: Annotated[UploadFile | None, File(description="Product photo")] = None,
) -> ApiResponse:
    """Create a product from a multipart form with its photo."""
    image = await read_photo(photo)
    product = await service.create_product(
        name=name,
        price=parse_number(price, "price", float),
        stock=parse_number(stock, "stock", int),
        category=category,
        photo=image,
    )
    return ApiResponse(message="Product created successfully", data=product)


@router.get("/latest", response_model=ApiResponse)
async def get_latest_products(service: ServiceDep) -> ApiResponse:
    return ApiResponse(data=await service.get_latest_products())


@router.get("/high-price", response_model=ApiResponse)
async def get_high_price(service: ServiceDep) -> ApiResponse:
    return ApiResponse(data=await service.get_highest_price())


@router.get("/categories", response_model=ApiResponse)
async def get_categories(service: ServiceDep) -> ApiResponse:
    return ApiResponse(data=await service.get_categories())


@router.get("/admin-products", response_model=ApiResponse)
async def get_admin_products(service: ServiceDep) -> ApiResponse:
    return ApiResponse(data=await service.get_admin_products())


@router.get("/all-products", response_model=ApiResponse)
async def get_all_products(
    service: ServiceDep,
    search: Annotated[str | None, Query(description="Substring of the product name")] = None,
    price: Annotated[str | None, Query(description="Maximum price")] = None,
    category: Annotated[str | None, Query(description="Exact category")] = None,
    sort: Annotated[
        str | None,
        Query(description='"ascending" for cheapest first, anything else for most expensive first'),
    ] = None,
    page: Annotated[str | None, Query(description="1-based page number")] = None,
) -> ApiResponse:
    """Search and filter products, one page at a time."""
    result = await service.search_products(
        search=search,
        price=price,
        category=category,
        sort=sort,
        page=page,
    )
    return ApiResponse(data=result)


@router.get("/single/{product_id}", response_model=ApiResponse)
async def get_single_product(product_id: str, service: ServiceDep) -> ApiResponse:
    return ApiResponse(data=await service.get_product(product_id))


@router.put("/single/{product_id}", response_model=ApiResponse)
async def update_product(
    product_id: str,
    service: ServiceDep,
    name: Annotated[str | None, Form()] = None,
    price: Annotated[str | None, Form()] = None,
    stock: Annotated[str | None, Form()] = None,
    category: Annotated[str | None, Form()] = None,
    photo: Annotated[UploadFile | None, File(description="Replacement photo")] = None,
) -> ApiResponse:
    """Update the provided fields of a product, optionally replacing its photo."""
    provided = {
        field: value
        for field, value in {
            "name": name,
            "price": price,
            "stock": stock,
            "category": category,
        }.items()
        if value is not None and value.strip() != ""
    }
    try:
        changes = ProductUpdate(**provided)
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        raise ValidationError(f"Invalid {field}: {error['msg']}") from e

    image = await read_photo(photo)
    product = await service.update_product(product_id, changes, image)
    return ApiResponse(message="Product updated successfully", data=product)


@router.delete("/single/{product_id}", response_model=ApiResponse)
async def delete_product(product_id: str, service: ServiceDep) -> ApiResponse:
    await service.delete_product(product_id)
    return ApiResponse(message="Product deleted successfully")
