"""FastAPI application exposing the traveler capacity relay endpoint."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from capacity_relay.audit.logger import RelayLogger
from capacity_relay.config import Settings
from capacity_relay.models import ObservedRequest
from capacity_relay.proxy.cors import CorsMiddleware
from capacity_relay.webhook.relay import CapacityRelayPipeline, WebhookRelayClient
from capacity_relay.webhook.responses import error_body
from capacity_relay.webhook.validator import MethodNotAllowedError

RELAY_PATHS = ("/", "/webhook/capacity")
_RELAY_METHODS = ["GET", "HEAD", "POST", "PUT", "DELETE", "PATCH"]


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    settings = Settings.from_env()
    return create_app(settings, RelayLogger.from_settings(settings))


def create_app(
    settings: Settings,
    relay_log: RelayLogger | None = None,
) -> FastAPI:
    """Create the relay FastAPI app."""
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
    client = WebhookRelayClient(timeout=settings.timeout_seconds, relay_log=relay_log)
    pipeline = CapacityRelayPipeline(settings, client, relay_log)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    async def relay(request: Request) -> JSONResponse:
        body = await request.body()
        outcome = await pipeline.handle(
            request.method, body, _observe(request),
        )
        return JSONResponse(outcome.body, status_code=outcome.status_code)

    for path in RELAY_PATHS:
        app.add_api_route(path, relay, methods=_RELAY_METHODS)

    @app.exception_handler(StarletteHTTPException)
    async def relay_method_not_allowed(
        request: Request, exc: StarletteHTTPException,
    ) -> Response:
        # Methods without a registered route still get the relay 405 body
        if exc.status_code == 405 and request.url.path in RELAY_PATHS:
            rejected = MethodNotAllowedError(request.method)
            return JSONResponse(error_body(rejected.message), status_code=rejected.status_code)
        return await http_exception_handler(request, exc)

    app.add_middleware(CorsMiddleware)

    return app


def _observe(request: Request) -> ObservedRequest:
    return ObservedRequest(
        remote_addr=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        server_name=request.url.hostname,
    )
