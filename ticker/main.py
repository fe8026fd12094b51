"""
ORTEX login page prototype - FastAPI app.

Serves the sign-in page with a live EUR/USD ticker fed by a single upstream
WebSocket connection owned by the FeedConnectionManager.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request

from ticker.config import settings
from ticker.middleware.error_handler import register_exception_handlers
from ticker.observability.logs import setup_logging
from ticker.observability.metrics import create_metrics_router, record_api_request
from ticker.protocols.feed import LiveFeed
from ticker.routes_feed import router as feed_router
from ticker.routes_login import router as login_router
from ticker.services.feed_manager import FeedConnectionManager
from ticker.util.async_tools import shutdown_supervised_tasks

logger = logging.getLogger(__name__)


def create_app(feed_manager: Optional[LiveFeed] = None,
               start_feed: Optional[bool] = None) -> FastAPI:
    """Build the app. The feed starts on startup unless disabled."""
    feed = feed_manager or FeedConnectionManager()
    should_start = settings.FEED_ENABLED if start_feed is None else start_feed

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if should_start:
            await feed.start()
            logger.info(f"Live feed started for {feed.snapshot.subscription_topic}")
        else:
            logger.info("Live feed disabled, skipping start")

        yield

        try:
            await feed.stop()
            logger.info("Live feed stopped")

            await shutdown_supervised_tasks()
        except Exception as e:
            logger.error(f"Error stopping services: {e}")

    app = FastAPI(title="ORTEX Login Prototype", version="1.0", lifespan=lifespan)
    app.state.feed_manager = feed

    register_exception_handlers(app)

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        record_api_request(request.url.path, response.status_code, duration_ms)
        return response

    app.include_router(login_router)
    app.include_router(feed_router)
    app.include_router(create_metrics_router())

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    setup_logging()
    uvicorn.run(create_app(), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
