import os
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.staticfiles import StaticFiles

from services.newsfeed.app.errors import register_exception_handlers, unhandled_error_response
from services.newsfeed.app.llm_client import LLMClient
from services.newsfeed.app.news_client import GNewsClient
from services.newsfeed.app.news_service import NewsService
from services.newsfeed.app.routes import bookmarks, chat, news, ops, summaries, ui
from services.newsfeed.app.throttle import FetchThrottle
from shared.app_logging.logger import CorrelationContext, setup_logging
from shared.config.settings import Settings, get_settings
from shared.storage.base import StorageBackend
from shared.storage.factory import create_storage
from shared.utils.health import create_newsfeed_health_checker

# Setup logging
logger = setup_logging("newsfeed")

STATIC_DIR = os.path.join(os.path.dirname(__file__), "static")
CORRELATION_HEADERS = ("X-Correlation-ID", "X-Request-ID")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    logger.info(
        f"Starting {settings.service_name} v{settings.version} "
        f"(storage={app.state.storage.name}, news_api={'on' if settings.news.configured else 'off'}, "
        f"llm={'on' if app.state.llm.configured else 'off'})"
    )
    try:
        yield
    finally:
        await app.state.llm.close()
        app.state.storage.close()

        from shared.utils.redis_client import close_all_redis_clients

        close_all_redis_clients()
        logger.info("News feed service shut down cleanly")


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[StorageBackend] = None,
    news_client: Optional[GNewsClient] = None,
    llm_client: Optional[LLMClient] = None,
    throttle: Optional[FetchThrottle] = None,
) -> FastAPI:
    """Wire the news feed API. Collaborators can be injected for tests."""
    settings = settings or get_settings()
    storage = storage or create_storage(settings)
    timeout = settings.service.http_timeout

    news_client = news_client or GNewsClient(settings.news, timeout=timeout)
    llm_client = llm_client or LLMClient(settings.llm, timeout=timeout)
    throttle = throttle or FetchThrottle(capacity=settings.news.throttle_capacity)

    app = FastAPI(title="DevBytes", version=settings.version, lifespan=lifespan)
    app.state.settings = settings
    app.state.storage = storage
    app.state.llm = llm_client
    app.state.news_service = NewsService(
        storage,
        throttle,
        news_client,
        cache_ttl_seconds=settings.news.cache_ttl_seconds,
        cooldown_seconds=settings.news.cooldown_seconds,
    )
    app.state.health_checker = create_newsfeed_health_checker(storage, settings)

    @app.middleware("http")
    async def correlation_middleware(request: Request, call_next):
        incoming = next(
            (request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)),
            None,
        )
        with CorrelationContext(incoming) as correlation_id:
            start = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception as e:
                response = unhandled_error_response(request, e)
            elapsed = (time.perf_counter() - start) * 1000
            if request.url.path.startswith("/api"):
                logger.info(
                    f"{request.method} {request.url.path} -> {response.status_code} in {elapsed:.1f}ms"
                )
            response.headers["X-Correlation-ID"] = correlation_id
            return response

    register_exception_handlers(app)
    for module in (news, summaries, bookmarks, chat, ops, ui):
        app.include_router(module.router)
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    return app


app = create_app()
