"""FastAPI entry point exposing the card service in-process over HTTP."""
from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from cashback.core.config import get_settings
from cashback.core.logging_config import configure_logging, get_logger
from cashback.repositories.base import StorageError
from cashback.routers import cards as cards_router
from cashback.services.card_service import CardService

logger = get_logger(__name__)


def create_app(card_service: Optional[CardService] = None) -> FastAPI:
    """Factory compatible with uvicorn (``uvicorn cashback.app:create_app --factory``)."""
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(title="Cashback Tracker API")
    app.state.card_service = card_service or CardService.from_settings()

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError):
        logger.error("storage_error", path=request.url.path, error=str(exc))
        return JSONResponse({"detail": "Storage failure"}, status_code=500)

    app.include_router(cards_router.router)
    return app
