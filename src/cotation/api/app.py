"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from cotation.api.routes import router
from cotation.api.service import QuoteServer
from cotation.core.config import CotationConfig, load_config
from cotation.core.exceptions import QuoteFetchError
from cotation.provider.client import ProviderClient
from cotation.storage.store import create_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown lifecycle."""
    config = app.state._pending_config or load_config()
    store = await create_store(config.storage)
    provider = ProviderClient(config.provider)

    server = QuoteServer(config=config, provider=provider, store=store)
    app.state.quote_server = server
    logger.info("Quote server ready (ledger: %s)", store.path)

    yield

    await server.close()


def create_app(config: CotationConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    import cotation

    app = FastAPI(
        title="Cotation",
        description="USD-BRL quote relay",
        version=cotation.__version__,
        lifespan=lifespan,
    )

    # Stash config so lifespan can retrieve it
    app.state._pending_config = config

    app.include_router(router)

    @app.exception_handler(QuoteFetchError)
    async def quote_fetch_exception_handler(request: Request, exc: QuoteFetchError):
        return PlainTextResponse(str(exc), status_code=500)

    return app
