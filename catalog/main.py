"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from catalog.api.products import catalog_error_handler
from catalog.api.products import router as products_router
from catalog.cache import InMemoryCache
from catalog.config import settings
from catalog.errors import CatalogError
from catalog.services.media import MediaStoreClient


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Keep one media store client open for the lifetime of the app."""
    async with MediaStoreClient() as media:
        app.state.media = media
        yield


app = FastAPI(
    title="Product Catalog",
    description="Product catalog with cached reads, photo uploads and search",
    version="0.1.0",
    debug=settings.debug,
    lifespan=lifespan,
)

# Shared by every request of this process
app.state.cache = InMemoryCache()

app.add_exception_handler(CatalogError, catalog_error_handler)

# Include API routers
app.include_router(products_router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
