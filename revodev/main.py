"""FastAPI application entry point.

Startup sequence: configure logging -> init LLM adapter -> init rate limiter
-> wire executor and controller -> start rate-limit sweeper (lifespan).
"""

import asyncio
import contextlib
import os
from contextlib import asynccontextmanager

import structlog
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from revodev.api.routes import router
from revodev.core.llm_adapter import LLMAdapter
from revodev.core.logging_setup import configure_logging
from revodev.core.rate_limiter import RateLimiter, run_sweeper
from revodev.flows.controller import DegradationController
from revodev.flows.executor import FlowExecutor

load_dotenv()

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("startup.begin", degraded=app.state.controller.degraded)

    sweeper = None
    if app.state.start_sweeper:
        sweeper = asyncio.create_task(run_sweeper(app.state.rate_limiter))
    app.state.sweeper_task = sweeper

    logger.info("startup.complete")
    yield

    if sweeper is not None:
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
    logger.info("shutdown.complete")


def create_app(
    llm_adapter: LLMAdapter | None = None,
    rate_limiter: RateLimiter | None = None,
    start_sweeper: bool | None = None,
    trust_proxy_headers: bool | None = None,
) -> FastAPI:
    """Build the application with explicitly owned collaborators.

    Args:
        llm_adapter: Model adapter. Built from the environment if omitted.
        rate_limiter: Limiter shared by all capability endpoints. Built from
            the environment if omitted.
        start_sweeper: Run the periodic rate-limit sweep. Defaults to on,
            except when APP_ENV=test.
        trust_proxy_headers: Key rate limits on X-Forwarded-For / X-Real-IP.
            Only enable behind a proxy that overwrites them. Defaults to
            TRUST_PROXY_HEADERS (off).
    """
    configure_logging()

    if llm_adapter is None:
        llm_adapter = LLMAdapter()
    if rate_limiter is None:
        rate_limiter = RateLimiter.from_env()
    if start_sweeper is None:
        start_sweeper = os.environ.get("APP_ENV", "production") != "test"
    if trust_proxy_headers is None:
        trust_proxy_headers = os.environ.get("TRUST_PROXY_HEADERS", "false").lower() in ("1", "true", "yes")

    app = FastAPI(
        title="Revodev API",
        description="Electrical advice assistant for Revogreen Energy Hub",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state.llm_adapter = llm_adapter
    app.state.rate_limiter = rate_limiter
    app.state.controller = DegradationController(rate_limiter, FlowExecutor(llm_adapter))
    app.state.start_sweeper = start_sweeper
    app.state.trust_proxy_headers = trust_proxy_headers
    app.state.sweeper_task = None

    origins = [o.strip() for o in os.environ.get("CORS_ORIGINS", "*").split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "HEAD"],
        allow_headers=["*"],
        expose_headers=["X-Revodev-Outcome", "Retry-After"],
    )

    app.include_router(router)
    logger.info("app.created", degraded=not llm_adapter.is_healthy(),
                rate_limit=f"{rate_limiter.max_requests}/{int(rate_limiter.window_seconds)}s",
                sweeper=start_sweeper, trust_proxy_headers=trust_proxy_headers)
    return app


app = create_app()
