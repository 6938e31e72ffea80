"""FastAPI application entrypoint. No business logic; only wiring, middleware and error mapping."""

import logging
import uuid

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from newsdesk.api.responses import trace_id_for
from newsdesk.api.v1 import router as v1_router
from newsdesk.api.v1.health import API_VERSION
from newsdesk.core.config import Settings, get_settings
from newsdesk.core.container import Components, build_components
from newsdesk.core.errors import AppError
from newsdesk.core.logging import configure_logging
from newsdesk.schemas.common import ErrorItem, ErrorResponse

logger = logging.getLogger(__name__)

TRACE_HEADER = "X-Trace-Id"


def _error_response(
    request: Request,
    status_code: int,
    message: str,
    code: str,
    errors: list[ErrorItem] | list[dict] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    trace_id = trace_id_for(request)
    body = ErrorResponse(message=message, code=code, errors=errors, trace_id=trace_id)
    response_headers = {TRACE_HEADER: trace_id}
    if headers:
        response_headers.update(headers)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body, by_alias=True),
        headers=response_headers,
    )


def _validation_items(exc: RequestValidationError) -> list[ErrorItem]:
    items = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        items.append(
            ErrorItem(
                field=".".join(loc) or "request",
                message=err.get("msg", "Invalid value"),
                code=str(err.get("type", "invalid")).upper(),
            )
        )
    return items


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """Map every failure to the error envelope; unexpected errors never leak details in prod."""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "Request failed",
            extra={
                "code": exc.code,
                "status_code": exc.status_code,
                "path": request.url.path,
                "user_id": getattr(request.state, "user_id", None),
                "trace_id": trace_id_for(request),
            },
        )
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return _error_response(
            request, exc.status_code, exc.message, exc.code, exc.errors, headers=headers
        )

    def _log_client_error(request: Request, code: str, status_code: int) -> None:
        logger.warning(
            "Request rejected",
            extra={
                "code": code,
                "status_code": status_code,
                "path": request.url.path,
                "trace_id": trace_id_for(request),
            },
        )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        _log_client_error(request, "VALIDATION_ERROR", 400)
        return _error_response(
            request, 400, "Validation failed", "VALIDATION_ERROR", _validation_items(exc)
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            _log_client_error(request, "ROUTE_NOT_FOUND", 404)
            return _error_response(
                request, 404, f"Route {request.url.path} not found", "ROUTE_NOT_FOUND"
            )
        code = f"HTTP_{exc.status_code}"
        _log_client_error(request, code, exc.status_code)
        return _error_response(
            request,
            exc.status_code,
            str(exc.detail),
            code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
        logger.warning(
            "Unique constraint violated",
            extra={"path": request.url.path, "trace_id": trace_id_for(request)},
        )
        return _error_response(request, 409, "Resource already exists", "DUPLICATE_ENTRY")

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "Unhandled error",
            extra={"path": request.url.path, "trace_id": trace_id_for(request)},
        )
        message = (
            "Internal server error. Please try again later."
            if settings.is_production
            else str(exc) or exc.__class__.__name__
        )
        return _error_response(request, 500, message, "INTERNAL_SERVER_ERROR")


def create_app(settings: Settings | None = None, components: Components | None = None) -> FastAPI:
    """Build the application. Raises ConfigError before serving if configuration is invalid."""
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)
    components = components or build_components(settings)

    app = FastAPI(
        title="Newsdesk API",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.components = components

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[TRACE_HEADER],
    )

    @app.middleware("http")
    async def attach_trace_id(request: Request, call_next):
        request.state.trace_id = request.headers.get(TRACE_HEADER) or uuid.uuid4().hex
        response = await call_next(request)
        response.headers[TRACE_HEADER] = request.state.trace_id
        return response

    register_exception_handlers(app, settings)
    app.include_router(v1_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Newsdesk API"}

    logger.info(
        "Application configured",
        extra={"app_env": settings.APP_ENV, "api_prefix": settings.API_PREFIX},
    )
    return app


app = create_app()
