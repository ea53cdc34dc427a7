"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..catalog.cache import TTLCache
from ..config import catalog_config
from ..database import get_engine, init_db
from .routers import cache, products


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: initialize database and response cache on startup."""
    engine = get_engine()
    await init_db(engine)

    # Store engine and cache in router state
    products._engine = engine
    products._cache = TTLCache(max_size=catalog_config.cache_max_entries)

    yield

    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title="Storefront Catalog API",
        description="Product catalog queries with relevance-ranked search",
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(products.router, prefix="/api/products", tags=["products"])
    app.include_router(cache.router, prefix="/api/cache", tags=["cache"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
