from contextlib import asynccontextmanager
from fastapi import FastAPI
from redis.exceptions import RedisError
from skolara import logger
from skolara.api import cur_version, version_prefix
from skolara.api.routers import admin_routers, public_routers
from skolara.cache._cache import redis_client
from skolara.common.custom_exceptions import register_all_exceptions
from skolara.common.logging_setup import setup_logging, shutdown_logging
from skolara.config.admin_config import admin_config
from skolara.db.connection import async_engine
from skolara.middlewares.admin_guard_middleware import AdminGuardMiddleware
from skolara.middlewares.request_id_middleware import RequestIdMiddleware
from metrics.custom_instrumentator import instrumentator


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    setup_logging()
    logger.info("app.startup", extra={"env": admin_config.ENV, "service": admin_config.SERVICE_NAME})
    try:
        yield
    finally:
        # new requests are no longer accepted at this point
        await async_engine.dispose()
        try:
            await redis_client.aclose()
        except (RedisError, OSError):
            logger.warning("app.shutdown.redis_close_failed")
        logger.info("app.shutdown")
        shutdown_logging()


def create_app():
    app = FastAPI(
        title="Skolara",
        version=cur_version,
        lifespan=app_lifespan)

    app.include_router(public_routers)

    if admin_config.ENABLE_ADMIN:
        app.include_router(admin_routers)      # mounts /api/v1/admin
        app.add_middleware(AdminGuardMiddleware, secret=admin_config.ADMIN_SECRET,
                           path_prefix=f"{version_prefix}/admin")

    app.add_middleware(RequestIdMiddleware)
    register_all_exceptions(app)

    if admin_config.ENABLE_METRICS:
        instrumentator.instrument(app).expose(app, endpoint="/metrics")

    return app

app = create_app()
