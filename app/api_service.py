from __future__ import annotations

import logging
from datetime import timezone, tzinfo
from typing import Any, Dict, List, Optional
from zoneinfo import ZoneInfo

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import Settings, settings as default_settings
from messaging.telegram import RelayError, TelegramClient
from models.schema import error_body
from ops.structured_logger import setup_logging
from repos.device_repo import DeviceNotFound, DeviceRepository
from repos.rate_limit_repo import RateLimitRepository
from utils.request_context import clear_request_id, new_request_id, set_request_id

from app.routers.health import router as health_router
from app.routers.relay import router as relay_router

log = logging.getLogger("smsrelay.api")

RATE_LIMIT_MESSAGE = "Too many requests from this IP, please try again later."
RATE_LIMIT_SWEEP_THRESHOLD = 10_000


def _get_request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or request.headers.get("x-request-id") or ""


def _is_api_path(path: str) -> bool:
    return path == "/api" or path.startswith("/api/")


def _client_address(request: Request, trust_forwarded_for: bool) -> str:
    if trust_forwarded_for:
        fwd = request.headers.get("x-forwarded-for", "")
        first = fwd.split(",", 1)[0].strip()
        if first:
            return first
    return request.client.host if request.client else "unknown"


def _validation_message(errors: List[Dict[str, Any]]) -> str:
    missing: List[str] = []
    invalid: List[str] = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        if loc and err.get("type") in ("missing", "string_too_short"):
            missing.append(loc[-1])
        else:
            invalid.append(f"{'.'.join(loc) or 'body'}: {err.get('msg', 'invalid')}")
    parts = []
    if missing:
        parts.append("Missing required parameters: " + ", ".join(missing))
    if invalid:
        parts.append("Invalid parameters: " + "; ".join(invalid))
    return "; ".join(parts) or "Invalid request"


def _display_tz(name: str) -> tzinfo:
    if name.strip().upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def create_app(
    settings: Optional[Settings] = None,
    device_repo: Optional[DeviceRepository] = None,
    telegram: Optional[TelegramClient] = None,
) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(title="SMS Relay API", version=settings.VERSION)
    app.state.settings = settings
    app.state.display_tz = _display_tz(settings.DISPLAY_TIMEZONE)
    app.state.device_repo = device_repo if device_repo is not None else DeviceRepository()
    app.state.telegram = telegram or TelegramClient(api_base=settings.TELEGRAM_API_BASE)
    app.state.rate_limits = RateLimitRepository(
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
    )

    @app.middleware("http")
    async def rate_limit_middleware(request: Request, call_next):
        if not _is_api_path(request.url.path):
            return await call_next(request)

        limiter: RateLimitRepository = request.app.state.rate_limits
        addr = _client_address(request, settings.TRUST_FORWARDED_FOR)
        allowed, remaining = limiter.reserve(addr)
        limiter.sweep_if_due(RATE_LIMIT_SWEEP_THRESHOLD)
        if not allowed:
            log.warning(
                "rate_limited",
                extra={"extra": {"event": "rate_limited", "path": request.url.path, "client": addr}},
            )
            response = JSONResponse(status_code=429, content=error_body(RATE_LIMIT_MESSAGE))
        else:
            response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limiter.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response

    # Registered last so it wraps the rate limiter and every log line gets the id.
    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        rid = request.headers.get("x-request-id") or new_request_id()
        request.state.request_id = rid
        set_request_id(rid)
        try:
            response = await call_next(request)
        finally:
            clear_request_id()
        response.headers["X-Request-Id"] = rid
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        rid = _get_request_id(request)
        status_code = exc.status_code
        message = str(exc.detail)
        # Unmatched path or method: both surface as an unknown route.
        if status_code in (404, 405):
            status_code = 404
            message = "Route not found"
        log.warning(
            "http_exception",
            extra={
                "extra": {
                    "event": "http_exception",
                    "status_code": status_code,
                    "detail": message,
                    "path": request.url.path,
                    "method": request.method,
                    "request_id": rid,
                }
            },
        )
        return JSONResponse(status_code=status_code, content=error_body(message))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        rid = _get_request_id(request)
        message = _validation_message(list(exc.errors()))
        log.warning(
            "validation_error",
            extra={
                "extra": {
                    "event": "validation_error",
                    "detail": message,
                    "path": request.url.path,
                    "method": request.method,
                    "request_id": rid,
                }
            },
        )
        return JSONResponse(status_code=400, content=error_body(message))

    @app.exception_handler(DeviceNotFound)
    async def device_not_found_handler(request: Request, exc: DeviceNotFound):
        log.info(
            "device_not_found",
            extra={"extra": {"event": "device_not_found", "device_id": exc.device_id, "path": request.url.path}},
        )
        return JSONResponse(status_code=404, content=error_body("Device not registered"))

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        log.error(
            "relay_error",
            extra={"extra": {"event": "relay_error", "message": str(exc), "path": request.url.path}},
        )
        return JSONResponse(status_code=500, content=error_body(str(exc)))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        rid = _get_request_id(request)
        log.error(
            "internal_unhandled_exception",
            extra={
                "extra": {
                    "event": "internal_unhandled_exception",
                    "error_type": type(exc).__name__,
                    "message": str(exc),
                    "path": request.url.path,
                    "method": request.method,
                    "request_id": rid,
                }
            },
            exc_info=True,
        )
        return JSONResponse(status_code=500, content=error_body("Internal server error"))

    # Devices and uptime pingers call from anywhere.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    app.include_router(health_router, tags=["health"])
    app.include_router(relay_router, prefix="/api", tags=["relay"])
    return app


setup_logging(default_settings.LOG_LEVEL, environment=default_settings.ENVIRONMENT, version=default_settings.VERSION)

app = create_app()
