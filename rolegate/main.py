import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from rolegate.core.background import DetachedTasks
from rolegate.core.cors import add_cors_middleware
from rolegate.core.exception_handlers import register_exception_handlers
from rolegate.core.http import create_moderation_client
from rolegate.core.logging import configure_logging
from rolegate.core.request_logging import add_request_logging_middleware
from rolegate.core.settings import get_settings
from rolegate.db.engine import engine, init_db
from rolegate.moderation.gate import ModerationGate
from rolegate.moderation.pipeline import (
    DisabledModerationPipeline,
    HttpModerationPipeline,
)
from rolegate.roles.registry import SqlRegistryClient
from rolegate.roles.resolver import RoleResolver
from rolegate.router import api_router

configure_logging()

logger = logging.getLogger("rolegate")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    init_db(engine)

    detached = DetachedTasks()
    app.state.role_resolver = RoleResolver(
        SqlRegistryClient(engine),
        detached,
        trusted_suffix=settings.trusted_email_suffix,
        lookup_timeout=settings.role_lookup_timeout_seconds,
    )

    moderation_client = None
    if settings.moderation_enabled:
        moderation_client = create_moderation_client(
            settings.moderation_api_key, settings.moderation_timeout_seconds
        )
        pipeline = HttpModerationPipeline(
            moderation_client, settings.moderation_api_url
        )
    else:
        logger.warning("MODERATION_API_URL not set; profile moderation disabled")
        pipeline = DisabledModerationPipeline()
    app.state.moderation_gate = ModerationGate(
        pipeline, timeout=settings.moderation_timeout_seconds
    )

    yield

    await detached.drain(settings.shutdown_grace_seconds)
    if moderation_client is not None:
        await moderation_client.aclose()


app = FastAPI(title="Rolegate", version="0.1.0", lifespan=lifespan)

app.include_router(api_router)

add_request_logging_middleware(app)
add_cors_middleware(app)
register_exception_handlers(app)
