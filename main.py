"""
Main API module for Shortener Platform.

Responsibilities:
    - Expose the HTTP surface over the storage contract (shorten, batch shorten,
      redirect, per-owner listing, asynchronous delete, ping, stats)
    - Resolve the request owner from a signed cookie into a typed RequestContext
    - Map domain errors to status codes in one place
    - Request logging and gzip compression

Architecture:
    - App Factory pattern (create_app) for test isolation and DI.
    - One storage backend per app, chosen by the storage factory from env.
    - ShortenerManager orchestrates validation, code allocation and deletion.
    - Shutdown drains the delete pipeline and closes the backend.
"""

import ipaddress
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Body, Depends, FastAPI, HTTPException, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from pydantic import BaseModel

from auth import RequestContext, apply_owner_cookie, get_request_context
from shortener_platform.config import settings
from shortener_platform.logging_config import configure_logging
from shortener_platform.manager.code_generator import BatchItem
from shortener_platform.manager.shortener_manager import ShortenerManager
from shortener_platform.storage.base import BaseStorage
from shortener_platform.storage.exceptions import (
    ConflictError,
    GoneError,
    NotFoundError,
    StorageError,
    UnsupportedOperationError,
)
from shortener_platform.storage.storage_factory import get_storage

log = logging.getLogger("shortener")


class ShortenRequest(BaseModel):
    """Request payload for `POST /api/shorten`."""
    url: str


class ShortenBatchRequest(BaseModel):
    """One item of `POST /api/shorten/batch`."""
    correlation_id: str
    original_url: str


def _in_trusted_subnet(ip: Optional[str], subnet: str) -> bool:
    if not subnet or not ip:
        return False
    try:
        return ipaddress.ip_address(ip.strip()) in ipaddress.ip_network(subnet, strict=False)
    except ValueError:
        return False


def create_app(storage: Optional[BaseStorage] = None, trusted_subnet: Optional[str] = None) -> FastAPI:
    """
    Factory function to build and configure a new FastAPI app instance.

    Args:
        storage (Optional[BaseStorage]): Backend to use; built from env when omitted.
        trusted_subnet (Optional[str]): CIDR allowed to read stats; defaults to settings.

    Returns:
        FastAPI: A fully configured application with its own storage, manager
                 and delete pipeline.
    """
    configure_logging()

    # ----------------------------------------------------------------
    # Per-app instances (isolated for tests, swappable for production)
    # ----------------------------------------------------------------
    storage = storage or get_storage()  # memory, file or postgres based on env
    manager = ShortenerManager(storage=storage)
    subnet = settings.TRUSTED_SUBNET if trusted_subnet is None else trusted_subnet

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        log.info("Shortener storage backend: %s", getattr(storage, "backend_name", type(storage).__name__))
        yield
        await manager.pipeline.drain()
        storage.close()
        log.info("Shortener stopped")

    app = FastAPI(
        title="Shortener Platform",
        description="URL shortener with pluggable storage backends",
        lifespan=lifespan,
    )
    app.state.storage = storage
    app.state.manager = manager

    app.add_middleware(GZipMiddleware, minimum_size=500)

    @app.middleware("http")
    async def owner_cookie(request: Request, call_next):
        response = await call_next(request)
        return apply_owner_cookie(request, response)

    @app.middleware("http")
    async def request_logging(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        log.info(
            "%s %s -> %d (%.1f ms)",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    # ----------------------------------------------------------------
    # Error mapping
    # ----------------------------------------------------------------
    @app.exception_handler(GoneError)
    async def _gone(_request: Request, exc: GoneError):
        return JSONResponse({"detail": "URL has been deleted"}, status_code=410)

    @app.exception_handler(NotFoundError)
    async def _not_found(_request: Request, exc: NotFoundError):
        return JSONResponse({"detail": "URL not found"}, status_code=404)

    @app.exception_handler(ConflictError)
    async def _conflict(_request: Request, exc: ConflictError):
        return JSONResponse({"result": storage.short_url_for(exc.existing_code)}, status_code=409)

    @app.exception_handler(StorageError)
    async def _storage_error(_request: Request, exc: StorageError):
        log.error("Storage failure: %s", exc)
        return JSONResponse({"detail": "storage error"}, status_code=500)

    # ----------------------------------------------------------------
    # Routes
    # ----------------------------------------------------------------
    @app.get("/ping")
    def ping() -> Response:
        try:
            manager.ping()
        except (UnsupportedOperationError, StorageError) as exc:
            log.warning("Ping failed: %s", exc)
            raise HTTPException(status_code=500, detail="database connection error")
        return Response(status_code=200)

    @app.post("/")
    async def shorten_text(request: Request, ctx: RequestContext = Depends(get_request_context)) -> Response:
        """Plain-text body in, plain-text short URL out (201 created, 409 already stored)."""
        url = (await request.body()).decode("utf-8", errors="replace").strip()
        try:
            result = await run_in_threadpool(manager.shorten, url, ctx.owner_id)
        except ValueError:
            raise HTTPException(status_code=400, detail="wrong parameters")
        return PlainTextResponse(result.short_url, status_code=201 if result.created else 409)

    @app.post("/api/shorten")
    def shorten_json(req: ShortenRequest, ctx: RequestContext = Depends(get_request_context)) -> Response:
        try:
            result = manager.shorten(req.url, ctx.owner_id)
        except ValueError:
            raise HTTPException(status_code=400, detail="wrong parameters")
        return JSONResponse({"result": result.short_url}, status_code=201 if result.created else 409)

    @app.post("/api/shorten/batch")
    def shorten_batch(
        batch: List[ShortenBatchRequest],
        ctx: RequestContext = Depends(get_request_context),
    ) -> Response:
        items = [BatchItem(b.correlation_id, b.original_url) for b in batch]
        try:
            results = manager.shorten_batch(items, ctx.owner_id)
        except ValueError:
            raise HTTPException(status_code=400, detail="wrong parameters")
        body = [{"correlation_id": r.correlation_id, "short_url": r.short_url} for r in results]
        return JSONResponse(body, status_code=201)

    @app.get("/api/user/urls")
    def user_urls(ctx: RequestContext = Depends(get_request_context)) -> Response:
        if not ctx.cookie_existed:
            raise HTTPException(status_code=401, detail="Unauthorized - cookie was created by request")
        urls = manager.user_urls(ctx.owner_id)
        if not urls:
            return Response(status_code=204)
        return JSONResponse([{"short_url": u.short_url, "original_url": u.original_url} for u in urls])

    @app.delete("/api/user/urls")
    async def delete_user_urls(
        codes: List[str] = Body(...),
        ctx: RequestContext = Depends(get_request_context),
    ) -> Response:
        """Accept codes for asynchronous deletion; answers before anything is deleted."""
        if not codes:
            raise HTTPException(status_code=400, detail="No URLs provided for deletion")
        manager.delete_async(codes, ctx.owner_id)
        return Response(status_code=202)

    @app.get("/api/internal/stats")
    def internal_stats(request: Request) -> Dict[str, Any]:
        if not _in_trusted_subnet(request.headers.get("x-real-ip"), subnet):
            raise HTTPException(status_code=403, detail="access denied")
        stats = manager.stats()
        return {"urls": stats.urls, "users": stats.users}

    @app.get("/{short_code}")
    def redirect(short_code: str) -> Response:
        original = manager.resolve(short_code)
        return RedirectResponse(url=original, status_code=307)

    return app


# `uvicorn main:app` and `from main import app` continue to work.
app = create_app()
