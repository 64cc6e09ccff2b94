"""FastAPI application for the Linen Service API."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routes import router
from api.schemas import ErrorResponse
from linen_tool.config import LinenConfig, configure_logging, load_config
from linen_tool.models import LinenServiceError
from linen_tool.store import BatchStore

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = {
    "not_found": 404,
    "duplicate_batch_id": 409,
}

_QUANTITY_FIELDS = {"quantity_sent", "quantity_received"}


def _validation_body(exc: RequestValidationError) -> ErrorResponse:
    errors = []
    quantity_error = False
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        if loc and loc[-1] in _QUANTITY_FIELDS:
            quantity_error = True
        errors.append(f"{'.'.join(loc) or 'request'}: {err.get('msg', 'invalid value')}")
    error_type = "invalid_quantity" if quantity_error else "invalid_request"
    return ErrorResponse(error_type=error_type, errors=errors)


def _build_store(config: LinenConfig) -> BatchStore:
    if config.data_file:
        return BatchStore.from_file(
            config.data_file,
            vat_rate=config.vat_rate,
            surcharge_rate=config.express_surcharge,
        )
    logger.warning("LINEN_DATA_FILE not set, starting with an empty store")
    return BatchStore([], [], vat_rate=config.vat_rate, surcharge_rate=config.express_surcharge)


def create_app(store: BatchStore | None = None, config: LinenConfig | None = None) -> FastAPI:
    """Build the application with its store constructed once, up front."""
    config = config or load_config()
    configure_logging(config.log_level)

    app = FastAPI(
        title="Linen Service API",
        description="Batch tracking, discrepancy reconciliation and monthly invoicing for linen services.",
        version="1.0.0",
    )
    app.state.store = store if store is not None else _build_store(config)

    # CORS: allow frontend origins
    # Set ALLOWED_ORIGINS="*" to allow any origin
    allow_all = config.allow_all_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if allow_all else config.allowed_origins,
        allow_credentials=not allow_all,  # credentials not allowed with wildcard
        allow_methods=["GET", "POST", "PUT", "PATCH", "OPTIONS"],
        allow_headers=["*"],
        max_age=3600,
    )

    @app.exception_handler(LinenServiceError)
    async def linen_error_handler(request: Request, exc: LinenServiceError):
        status = _STATUS_BY_ERROR.get(exc.error_type, 400)
        logger.info("%s %s -> %d %s", request.method, request.url.path, status, exc.error_type)
        body = ErrorResponse(error_type=exc.error_type, errors=exc.errors)
        return JSONResponse(status_code=status, content=body.model_dump())

    @app.exception_handler(RequestValidationError)
    async def request_error_handler(request: Request, exc: RequestValidationError):
        body = _validation_body(exc)
        logger.info("%s %s -> 400 %s", request.method, request.url.path, body.error_type)
        return JSONResponse(status_code=400, content=body.model_dump())

    app.include_router(router)

    @app.get("/")
    async def root():
        return {
            "name": "Linen Service API",
            "version": "1.0.0",
            "docs": "/docs",
            "health": "/api/v1/health",
        }

    return app


app = create_app()
