import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from shopdesk.api.routes.admins import router as admins_router
from shopdesk.api.routes.ads_costs import router as ads_costs_router
from shopdesk.api.routes.auth import router as auth_router
from shopdesk.api.routes.charges import router as charges_router
from shopdesk.api.routes.dashboard import router as dashboard_router
from shopdesk.api.routes.orders import router as orders_router
from shopdesk.api.routes.products import router as products_router
from shopdesk.api.routes.salaries import router as salaries_router
from shopdesk.api.routes.scan_orders import router as scan_orders_router
from shopdesk.api.routes.stock import router as stock_router
from shopdesk.core.config import settings
from shopdesk.core.errors import DUPLICATE_RECORD_MESSAGE, INTERNAL_ERROR_MESSAGE, ApiError
from shopdesk.core.logging_config import configure_logging
from shopdesk.db.database import SessionLocal
from shopdesk.services.bootstrap import ensure_super_admin

logger = logging.getLogger(__name__)


def _error_body(message: str, details=None) -> dict:
    body = {"error": message}
    if details is not None:
        body["details"] = jsonable_encoder(details)
    return body


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    db = SessionLocal()
    try:
        ensure_super_admin(db)
    finally:
        db.close()
    yield


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.details))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
                "message": error.get("msg"),
            }
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body("Validation error", details),
        )

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError):
        logger.warning("integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=_error_body(DUPLICATE_RECORD_MESSAGE))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(INTERNAL_ERROR_MESSAGE),
        )


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_exception_handlers(app)
    app.include_router(auth_router)
    app.include_router(admins_router)
    app.include_router(products_router)
    app.include_router(stock_router)
    app.include_router(orders_router)
    app.include_router(scan_orders_router)
    app.include_router(salaries_router)
    app.include_router(charges_router)
    app.include_router(ads_costs_router)
    app.include_router(dashboard_router)

    @app.get("/health", tags=["System"])
    def health_check():
        return {"status": "ok"}

    return app


app = create_app()
