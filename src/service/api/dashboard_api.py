"""API service for the InfluxDB dashboard.

Provides REST API endpoints for:
- Relaying Flux queries and schema lookups to InfluxDB
- Reading and writing the dashboard settings document
- Health checks
- Serving the static dashboard, when its directory exists
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Awaitable, Dict, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, Field

from config.config import API_TITLE, API_VERSION
from config.models import InfluxConfig, ServiceConfig
from relay.client import (
    InfluxRelay,
    UpstreamError,
    UpstreamHTTPError,
    UpstreamResponse,
    UpstreamTransportError,
)
from storage.settings_store import JsonFileSettingsStore, SettingsStore, SettingsStoreError
from utils.logging import get_logger

logger = get_logger(__name__)


# Pydantic models for API requests and responses
class QueryRequest(BaseModel):
    """Raw Flux query forwarded verbatim."""
    query: str = Field(..., min_length=1)


class ConfigResponse(BaseModel):
    """Upstream details the dashboard may see (never the token)."""
    bucket: str
    organization: str


class SuccessResponse(BaseModel):
    success: bool = True


class MeasurementPatchResponse(BaseModel):
    success: bool = True
    settings: Dict[str, Any]


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str
    timestamp: str
    settings_readable: bool
    upstream_configured: bool


router = APIRouter(prefix="/api")


def get_relay(request: Request) -> InfluxRelay:
    """Dependency to get the upstream relay."""
    return request.app.state.relay


def get_store(request: Request) -> SettingsStore:
    """Dependency to get the settings store."""
    return request.app.state.store


def get_influx_config(request: Request) -> InfluxConfig:
    return request.app.state.influx_config


async def _relay(label: str, call: Awaitable[UpstreamResponse], default_type: str) -> Response:
    """Await an upstream call and pass its body through unchanged."""
    try:
        upstream = await call
    except UpstreamHTTPError as e:
        logger.error(f"{label} error: HTTP {e.status_code}: {e.body}")
        raise
    except UpstreamError as e:
        logger.error(f"{label} error: {e}")
        raise

    return Response(
        content=upstream.body,
        status_code=upstream.status_code,
        media_type=upstream.content_type or default_type,
    )


@router.get("/health", response_model=HealthResponse)
def health_check(
    store: SettingsStore = Depends(get_store),
    influx_config: InfluxConfig = Depends(get_influx_config),
):
    """Health check endpoint. Never contacts the upstream database."""
    try:
        store.read()
        settings_readable = True
    except SettingsStoreError as e:
        logger.error(f"Settings health check failed: {e}")
        settings_readable = False

    upstream_configured = not influx_config.missing()
    status = "healthy" if settings_readable and upstream_configured else "degraded"

    return HealthResponse(
        status=status,
        timestamp=datetime.now(timezone.utc).isoformat(),
        settings_readable=settings_readable,
        upstream_configured=upstream_configured,
    )


@router.get("/config", response_model=ConfigResponse)
async def get_config(influx_config: InfluxConfig = Depends(get_influx_config)):
    """Bucket and organization the dashboard is pointed at."""
    return ConfigResponse(**influx_config.public_view())


@router.post("/query")
async def run_query(payload: QueryRequest, relay: InfluxRelay = Depends(get_relay)):
    """Run a raw Flux query and return the CSV result."""
    return await _relay("Query", relay.query(payload.query), "text/csv")


@router.get("/buckets")
async def list_buckets(relay: InfluxRelay = Depends(get_relay)):
    return await _relay("Buckets", relay.list_buckets(), "application/json")


@router.get("/devices")
async def list_devices(relay: InfluxRelay = Depends(get_relay)):
    """Distinct device names in the configured bucket."""
    return await _relay("Devices", relay.list_devices(), "text/csv")


@router.get("/measurements")
async def list_measurements(
    device: Optional[str] = None,
    relay: InfluxRelay = Depends(get_relay),
):
    """Measurement names, limited to one device's recent data when ``device`` is given."""
    return await _relay("Measurements", relay.list_measurements(device or None), "text/csv")


@router.get("/fields/{measurement}")
async def list_fields(measurement: str, relay: InfluxRelay = Depends(get_relay)):
    return await _relay("Fields", relay.list_fields(measurement), "text/csv")


@router.get("/tags/{measurement}")
async def list_tags(measurement: str, relay: InfluxRelay = Depends(get_relay)):
    return await _relay("Tags", relay.list_tags(measurement), "text/csv")


# Settings handlers are plain functions; FastAPI runs them in its threadpool
# so file I/O does not block the event loop.
@router.get("/settings")
def read_settings(store: SettingsStore = Depends(get_store)):
    return store.read()


@router.post("/settings", response_model=SuccessResponse)
def replace_settings(
    document: Dict[str, Any] = Body(...),
    store: SettingsStore = Depends(get_store),
):
    """Overwrite the whole settings document."""
    store.replace(document)
    return SuccessResponse()


@router.patch("/settings/measurement/{measurement}", response_model=MeasurementPatchResponse)
def patch_measurement_settings(
    measurement: str,
    partial: Dict[str, Any] = Body(...),
    store: SettingsStore = Depends(get_store),
):
    """Shallow-merge settings for one measurement."""
    merged = store.patch_measurement(measurement, partial)
    return MeasurementPatchResponse(settings=merged)


# Error handlers
async def upstream_http_error_handler(request: Request, exc: UpstreamHTTPError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.body})


async def upstream_transport_error_handler(request: Request, exc: UpstreamTransportError):
    return JSONResponse(status_code=500, content={"error": str(exc)})


async def settings_error_handler(request: Request, exc: SettingsStoreError):
    logger.error(f"Settings error: {exc}")
    return JSONResponse(status_code=500, content={"error": str(exc)})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    message = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": message or "Invalid request"})


async def not_found_handler(request: Request, exc: Exception):
    return JSONResponse(
        status_code=404,
        content={"error": "Resource not found", "path": request.url.path}
    )


def create_app(
    influx_config: InfluxConfig,
    service_config: Optional[ServiceConfig] = None,
    relay: Optional[InfluxRelay] = None,
    store: Optional[SettingsStore] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Creates the settings file with defaults when it does not exist yet.

    Args:
        influx_config: Upstream connection details
        service_config: HTTP service settings; defaults when omitted
        relay: Relay to use instead of one built from ``influx_config``
        store: Settings store to use instead of the JSON file from ``service_config``

    Returns:
        The configured application.
    """
    service_config = service_config or ServiceConfig()
    relay = relay or InfluxRelay(influx_config)
    store = store or JsonFileSettingsStore(service_config.settings_path)

    store.initialize()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application lifespan."""
        logger.info("Starting dashboard API service...")
        yield
        logger.info("Shutting down dashboard API service...")
        await relay.aclose()

    app = FastAPI(
        title=API_TITLE,
        description="Relay between the dashboard and InfluxDB, plus dashboard settings storage",
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.influx_config = influx_config
    app.state.service_config = service_config
    app.state.relay = relay
    app.state.store = store

    if service_config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(service_config.cors_origins),
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
            allow_headers=["Content-Type"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(UpstreamHTTPError, upstream_http_error_handler)
    app.add_exception_handler(UpstreamTransportError, upstream_transport_error_handler)
    app.add_exception_handler(SettingsStoreError, settings_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(404, not_found_handler)

    app.include_router(router)

    static_dir = service_config.static_dir
    if static_dir is not None and static_dir.is_dir():
        # Mounted last so the API routes above take precedence
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="dashboard")
        logger.info(f"Serving dashboard assets from {static_dir}")

    return app
