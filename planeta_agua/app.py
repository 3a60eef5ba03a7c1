# planeta_agua/app.py

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .addresses.controller import router as addresses_router
from .auth.controller import router as auth_router
from .core.config import Settings
from .core.error_handlers import add_request_id_middleware, setup_error_handlers
from .credit_cards.controller import router as credit_cards_router
from .database.core import RecordStore
from .orders.controller import router as orders_router
from .payments.controller import router as payments_router
from .payments.gateway import PaymentGateway
from .products.controller import router as products_router

logger = logging.getLogger(__name__)

STARTED_AT = time.monotonic()


def build_store(settings: Settings) -> RecordStore:
    """Pick the record store adapter named by STORE_BACKEND."""
    if settings.STORE_BACKEND == "sql":
        from .database.sql_store import SqlStore
        return SqlStore(settings.DATABASE_URL)
    from .database.supabase_store import SupabaseStore
    return SupabaseStore(settings.SUPABASE_URL, settings.SUPABASE_KEY)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    await app.state.store.connect()
    logger.info("Record store connected")

    yield

    await app.state.store.close()
    logger.info("Record store closed")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[RecordStore] = None,
    gateway: Optional[PaymentGateway] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(
        title=settings.API_TITLE,
        description=settings.API_DESCRIPTION,
        version=settings.API_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store or build_store(settings)
    app.state.gateway = gateway or PaymentGateway(
        settings.MERCADO_PAGO_ACCESS_TOKEN, timeout_seconds=settings.GATEWAY_TIMEOUT_SECONDS
    )

    setup_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials="*" not in settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(add_request_id_middleware)

    @app.get("/", tags=["Root"])
    async def read_root():
        return {"message": "Bem-vindo à API do Planeta Água! 🌎"}

    @app.get("/health", tags=["Root"])
    async def health_check():
        """Liveness payload with process uptime in seconds."""
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": time.monotonic() - STARTED_AT,
            "message": "API funcionando normalmente",
        }

    app.include_router(auth_router)
    app.include_router(products_router)
    app.include_router(addresses_router)
    app.include_router(credit_cards_router)
    app.include_router(orders_router)
    app.include_router(payments_router)

    return app
