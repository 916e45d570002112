"""ASGI application factory for the storage gateway.

The gateway middleware sits in front of a small Starlette application:
requests under the storage mount prefix are answered by
:class:`~storegate.middleware.storage.StorageGateway`, everything else
(health checks, unknown routes, lifespan events) reaches Starlette.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from starlette.applications import Starlette
from starlette.types import ASGIApp

from storegate.config import Settings, get_settings
from storegate.controllers import health
from storegate.lib import observability
from storegate.lib.audit import AuditLog
from storegate.lib.exceptions import EXCEPTION_HANDLERS
from storegate.lib.fallback import FallbackResolver
from storegate.lib.response_cache import ResponseCache
from storegate.lib.storage import LocalStorageReader, StorageReader
from storegate.middleware.storage import StorageGateway

logger = logging.getLogger(__name__)


def build_cache(settings: Settings) -> ResponseCache:
    return ResponseCache(
        ttl=settings.storage.cache_ttl,
        sweep_interval=settings.storage.sweep_interval,
        sweep_probability=settings.storage.sweep_probability,
    )


def build_fallback(settings: Settings, reader: StorageReader) -> FallbackResolver:
    return FallbackResolver(
        reader,
        namespace=settings.storage.user_photo_namespace,
        asset_name=settings.storage.default_asset,
        content_type=settings.storage.default_asset_content_type,
        max_age=settings.storage.default_max_age,
    )


def create_app(
    settings: Settings | None = None,
    *,
    reader: StorageReader | None = None,
    cache: ResponseCache | None = None,
    audit: AuditLog | None = None,
) -> ASGIApp:
    """Create the gateway-wrapped Starlette application.

    Collaborators default to the ones described by *settings*; tests pass
    their own to observe filesystem access, cache state or audit events.
    """
    settings = settings or get_settings()
    observability.configure(settings)

    reader = reader or LocalStorageReader(settings.storage.root)
    cache = cache or build_cache(settings)
    audit = audit or AuditLog()

    @asynccontextmanager
    async def lifespan(_app: Starlette):
        await cache.start()
        logger.info(
            "Storage gateway serving %s at %s (cache ttl %.1fs)",
            settings.storage.root,
            settings.storage.mount_prefix,
            cache.ttl,
        )
        try:
            yield
        finally:
            await cache.stop()

    inner_app = Starlette(
        debug=settings.debug,
        routes=health.routes,
        exception_handlers=EXCEPTION_HANDLERS,
        lifespan=lifespan,
    )
    inner_app.state.response_cache = cache

    gateway = StorageGateway(
        inner_app,
        reader=reader,
        cache=cache,
        fallback=build_fallback(settings, reader),
        audit=audit,
        mount_prefix=settings.storage.mount_prefix,
        image_max_age=settings.storage.image_max_age,
    )
    return observability.instrument_app(gateway)


app = create_app()
