# ledgerdesk/main.py
"""
Application entry point.

    uvicorn ledgerdesk.main:app --reload
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ledgerdesk.api.routes import api_router
from ledgerdesk.api.v1 import v1_router
from ledgerdesk.api.v1.envelope import error
from ledgerdesk.config.settings import settings
from ledgerdesk.core.logging_config import setup_logging
from ledgerdesk.domain.services.payment_caps import PaymentValidationError
from ledgerdesk.infrastructure.external.books_client import BooksApiError

logger = logging.getLogger("main")


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=error(str(exc.detail)))


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder(error("Invalid request", errors=[{k: v for k, v in e.items() if k != "ctx"} for e in exc.errors()])),
    )


async def _payment_error(request: Request, exc: PaymentValidationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content=error(exc.message))


async def _books_error(request: Request, exc: BooksApiError) -> JSONResponse:
    logger.error("Books API failure on %s %s: %s", request.method, request.url.path, exc.message)
    code = status.HTTP_404_NOT_FOUND if exc.status_code == 404 else status.HTTP_502_BAD_GATEWAY
    return JSONResponse(status_code=code, content=error(exc.message))


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(title=settings.APP_NAME, debug=settings.DEBUG)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(PaymentValidationError, _payment_error)
    app.add_exception_handler(BooksApiError, _books_error)

    app.include_router(api_router)
    app.include_router(v1_router)

    logger.info("%s started (environment=%s)", settings.APP_NAME, settings.ENVIRONMENT)
    return app


app = create_app()
