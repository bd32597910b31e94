"""FastAPI server: webhook ingestion and the published GeoJSON feed."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Dict, List, Optional, Tuple, Type

from fastapi import BackgroundTasks, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from .common import log_error, log_server_message, setup_logging
from .config import ProjectMapConfig
from .exceptions import AuthError, PayloadParseError, ProjectMapError, StorageError
from .feed import FeedCache, FeedRegenerator, regenerate_in_background
from .ingest import WebhookIngestor
from .ingest.pipeline import OUTCOME_NO_PROJECT_ID
from .models import RecordStore, create_store

logger = logging.getLogger(__name__)

FEED_PATH = "/projects.geojson"
FEED_MEDIA_TYPE = "application/geo+json; charset=utf-8"

# (exception type, status code, response detail)
ERROR_RULES: List[Tuple[Type[ProjectMapError], int, str]] = [
    (AuthError, 401, "Invalid signature"),
    (PayloadParseError, 400, "Bad JSON"),
    (StorageError, 503, "Storage unavailable, retry later"),
]


def _error_handler(status_code: int, detail: str) -> Callable:
    async def handler(request: Request, exc: ProjectMapError) -> JSONResponse:
        log_server_message(f"{status_code} {request.method} {request.url.path}: {type(exc).__name__}")
        return JSONResponse(status_code=status_code, content={"error": detail})
    return handler


def create_app(config: Optional[ProjectMapConfig] = None, store: Optional[RecordStore] = None) -> FastAPI:
    """Build the application around a validated config and a record store."""
    config = (config or ProjectMapConfig.from_env()).validate()
    store = store or create_store(config.store_backend, config.redis_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Handle application startup and shutdown."""
        setup_logging(config.log_dir)
        log_server_message("Server starting up")
        log_server_message(f"Webhook endpoint: {config.webhook_endpoint}")
        log_server_message(f"Feed endpoint: {FEED_PATH}")
        log_server_message(f"Required label: {config.map_label or '(none, publishing all)'}")
        log_server_message(f"Jitter radius: {config.jitter_meters}m")
        if not config.webhook_secret:
            log_server_message("Webhook secret not configured; signed deliveries will be rejected")
        log_server_message("Server ready")
        yield
        log_server_message("Server shutting down")
        await store.close()

    app = FastAPI(title="Project Map", version="1.0.0", lifespan=lifespan)
    app.state.config = config
    app.state.store = store
    app.state.ingestor = WebhookIngestor(config, store)
    app.state.feed_cache = FeedCache(store)
    app.state.regenerator = FeedRegenerator(store, app.state.feed_cache)

    for exc_type, status_code, detail in ERROR_RULES:
        app.add_exception_handler(exc_type, _error_handler(status_code, detail))

    @app.get("/health")
    async def health_check() -> Dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": "projectmap"}

    @app.get(FEED_PATH)
    async def project_feed() -> Response:
        """Serve the cached feed; never recomputed on the read path."""
        body = await app.state.feed_cache.read()
        return Response(
            content=body,
            status_code=200,
            media_type=FEED_MEDIA_TYPE,
            headers={
                "Cache-Control": f"public, max-age={config.feed_max_age}",
                "Access-Control-Allow-Origin": "*",
            },
        )

    @app.post(config.webhook_endpoint)
    async def project_webhook(request: Request, background_tasks: BackgroundTasks) -> JSONResponse:
        """Handle project webhooks; feed regeneration runs after the response is sent."""
        body = await request.body()
        signature = request.headers.get(config.signature_header)

        try:
            result = await app.state.ingestor.ingest(body, signature)
        except AuthError as e:
            # Never log the body or the received signature here
            log_server_message(f"Authentication failed: {e}")
            raise
        except PayloadParseError as e:
            log_server_message(f"JSON parsing error: {e}")
            await run_in_threadpool(log_error, str(e), body.decode("utf-8", errors="ignore"), config.log_dir)
            raise
        except StorageError as e:
            log_server_message(f"Storage error while ingesting webhook: {e}")
            await run_in_threadpool(log_error, f"Storage error: {e}", log_dir=config.log_dir)
            raise

        if result.should_regenerate:
            background_tasks.add_task(regenerate_in_background, app.state.regenerator)

        status = "acknowledged" if result.outcome == OUTCOME_NO_PROJECT_ID else "success"
        return JSONResponse(
            status_code=200,
            content={"status": status, "message": result.message, "outcome": result.outcome},
        )

    @app.exception_handler(404)
    @app.exception_handler(405)
    async def not_found_handler(request: Request, exc: HTTPException):
        """Handle 404 errors; a wrong method on a known path is reported the same way."""
        log_server_message(f"{exc.status_code} Not Found: {request.method} {request.url}")
        return JSONResponse(
            status_code=404,
            content={"error": "Not found", "path": request.url.path}
        )

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc: Exception):
        """Handle 500 errors."""
        log_server_message(f"500 Internal Server Error: {exc}")
        await run_in_threadpool(log_error, f"Unhandled error on {request.url.path}: {exc}", log_dir=config.log_dir)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"}
        )

    return app


if __name__ == "__main__":
    import uvicorn

    _config = ProjectMapConfig.from_env()
    uvicorn.run(
        "projectmap.server:create_app",
        factory=True,
        host=_config.host,
        port=_config.port,
        reload=False,
        log_level="info"
    )
