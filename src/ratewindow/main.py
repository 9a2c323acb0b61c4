from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from redis.asyncio import Redis, from_url
import structlog

from ratewindow.config import Settings, StrategyType, get_settings
from ratewindow.api.middleware import RateLimitMiddleware
from ratewindow.api.routes import router
from ratewindow.core.logging import setup_logging
from ratewindow.core.quota import QuotaManager
from ratewindow.core.storage.redis import RedisBackend
from ratewindow.core.strategies.base import RateLimitStrategy
from ratewindow.core.strategies.fixed_window import FixedWindowStrategy
from ratewindow.core.strategies.scripted_window import ScriptedFixedWindowStrategy

logger = structlog.get_logger()


def build_strategy(settings: Settings, redis_client: Redis) -> RateLimitStrategy:
    """Wires the configured limiter on top of an existing Redis client."""
    backend = RedisBackend(redis_client)
    strategy_cls = (
        ScriptedFixedWindowStrategy
        if settings.rate_limit_strategy == StrategyType.SCRIPT
        else FixedWindowStrategy
    )
    return strategy_cls(
        backend,
        key_prefix=settings.key_prefix,
        log_replies=settings.log_store_replies,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifecycle manager.
    Handles Redis connection startup and graceful shutdown.
    """
    settings = get_settings()

    # 1. Initialize Infrastructure
    redis_client = from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True
    )

    # 2. Initialize Core Logic (Dependency Injection)
    app.state.strategy = build_strategy(settings, redis_client)
    app.state.quota_manager = QuotaManager()

    logger.info("ratewindow_started", strategy=settings.rate_limit_strategy.value)
    yield

    # 3. Cleanup
    await redis_client.aclose()
    logger.info("ratewindow_stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        lifespan=lifespan
    )
    app.add_middleware(RateLimitMiddleware)
    app.include_router(router)
    return app


app = create_app()
