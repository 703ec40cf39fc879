"""
Main entry point for the order tracking service.
"""

import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes import router as tracking_router
from .config import StoreConfig
from .integrations.shopify import ShopifyOrderStore
from .resolver import TieredResolver

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the store client and resolver once, close the client on shutdown."""
    config = StoreConfig.from_env()
    store = ShopifyOrderStore(config)
    app.state.resolver = TieredResolver.for_store(store, config)
    logger.info(f"✅ Order tracking ready for {config.store_url} (API {config.api_version})")
    try:
        yield
    finally:
        await store.close()
        logger.info("🔌 Shopify session closed")


def create_app() -> FastAPI:
    app = FastAPI(title="Order Tracking API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(tracking_router, prefix="/api")

    @app.get("/health")
    def health_check():
        return {"status": "healthy"}

    return app


app = create_app()


def main():
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "3000")))


if __name__ == "__main__":
    main()
