# ivory/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ivory.api.routers import (
    admin,
    admin_catalog,
    carts,
    checkout,
    health,
    orders,
    payments,
    products,
    users,
)
from ivory.data.database import init_db
from ivory.domain.errors import (
    AccessDeniedError,
    AuthenticationError,
    ConflictError,
    InvalidRequestError,
    NotFoundError,
    UpstreamError,
)
from ivory.utils.logging import get_logger

logger = get_logger(__name__)

ERROR_STATUS = {
    InvalidRequestError: 400,
    AuthenticationError: 401,
    AccessDeniedError: 403,
    NotFoundError: 404,
    ConflictError: 409,
}


def error_response(status_code: int, message: str, details=None) -> JSONResponse:
    body = {"success": False, "message": message}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    return f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")


def register_exception_handlers(app: FastAPI) -> None:
    async def domain_error(request: Request, exc: Exception):
        status_code = next(code for cls, code in ERROR_STATUS.items() if isinstance(exc, cls))
        return error_response(status_code, str(exc))

    for exc_class in ERROR_STATUS:
        app.add_exception_handler(exc_class, domain_error)

    @app.exception_handler(UpstreamError)
    async def upstream_error(request: Request, exc: UpstreamError):
        logger.error(f"{request.method} {request.url.path} upstream failure: {exc.message} {exc.details}")
        return error_response(500, exc.message, exc.details)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return error_response(400, _validation_message(exc))

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path} failed: {exc}")
        return error_response(500, "Internal server error")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Initializing database")
    init_db()
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Ivory Beauty API",
        version="1.0.0",
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(admin.router)
    app.include_router(admin_catalog.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(checkout.router)
    app.include_router(payments.router)
    app.include_router(orders.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
