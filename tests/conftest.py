"""Shared fixtures for the catalog tests."""

from unittest.mock import AsyncMock

import pytest

from catalog.cache import InMemoryCache
from catalog.services.media import MediaStoreClient, UploadedImage
from catalog.services.products import ProductService
from tests.fakes import UPLOADED_PHOTO, FakeProductStore


@pytest.fixture
def store() -> FakeProductStore:
    return FakeProductStore()


@pytest.fixture
def media() -> AsyncMock:
    """Media client mock whose uploads always succeed."""
    client = AsyncMock(spec=MediaStoreClient)
    client.upload.return_value = UPLOADED_PHOTO
    client.remove.return_value = None
    return client


@pytest.fixture
def cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def service(store: FakeProductStore, cache: InMemoryCache, media: AsyncMock) -> ProductService:
    return ProductService(
        store=store,  # type: ignore[arg-type]
        cache=cache,
        media=media,
        folder="products",
        page_size=10,
    )


@pytest.fixture
def photo() -> UploadedImage:
    return UploadedImage(
        content=b"\x89PNG\r\n\x1a\nfake",
        content_type="image/png",
        filename="shirt.png",
    )
