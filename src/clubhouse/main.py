"""FastAPI application factory."""

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from clubhouse.api.events import router as events_router
from clubhouse.api.match_points import router as match_points_router
from clubhouse.api.matches import router as matches_router
from clubhouse.api.players import router as players_router
from clubhouse.api.schedule import router as schedule_router
from clubhouse.api.scores import router as scores_router
from clubhouse.api.standings import router as standings_router
from clubhouse.api.teams import router as teams_router
from clubhouse.config import Settings
from clubhouse.core.event_bus import EventBus
from clubhouse.db.engine import create_engine, create_tables

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: create engine, tables, and the event bus. Shutdown: release them."""
    settings: Settings = app.state.settings
    engine = create_engine(settings.database_url)
    await create_tables(engine)
    app.state.engine = engine
    app.state.event_bus = EventBus()
    logger.info("clubhouse_started env=%s", settings.clubhouse_env)

    yield

    app.state.event_bus.close()
    logger.info("event_bus_closed")
    await engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the Clubhouse FastAPI application."""
    settings = settings or Settings()

    logging.basicConfig(
        level=getattr(logging, settings.clubhouse_log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Clubhouse",
        version="0.1.0",
        description="Golf league scheduling, hole-by-hole scoring, and standings",
        docs_url="/docs" if settings.clubhouse_env != "production" else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.sse_slots = asyncio.Semaphore(settings.max_sse_connections)

    app.include_router(teams_router)
    app.include_router(players_router)
    app.include_router(matches_router)
    app.include_router(schedule_router)
    app.include_router(scores_router)
    app.include_router(match_points_router)
    app.include_router(standings_router)
    app.include_router(events_router)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok", "env": settings.clubhouse_env}

    return app


app = create_app()
