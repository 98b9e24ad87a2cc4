"""FastAPI application — HTTP access to the mood-adaptation core.

The lifespan builds one :class:`MoodAdaptCore` from the settings and wraps
it in a :class:`DecisionLoop`, stored on ``app.state.loop``.  Every route
goes through the loop so HTTP calls are serialised with any scheduled
cycles.  The loop's schedules are not started here: readings arrive over
``POST /mood/readings`` and decisions are requested explicitly.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from mood_adapt import __version__
from mood_adapt.api.middleware import setup_middleware
from mood_adapt.api.routes.adaptations import router as adaptations_router
from mood_adapt.api.routes.mood import router as mood_router
from mood_adapt.config import get_settings
from mood_adapt.core import create_core
from mood_adapt.logger import setup_logging
from mood_adapt.runtime.loop import DecisionLoop

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle hooks."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    core = create_core(settings)
    app.state.loop = DecisionLoop(
        core,
        poll_interval=settings.sensor_poll_interval_seconds,
        decision_interval=settings.decision_interval_seconds,
    )
    logger.info(
        "server.started",
        rules=len(core.rule_table.list_rules()),
        predictor=settings.predictor_kind,
    )

    yield

    loop: DecisionLoop = app.state.loop
    await loop.stop()
    app.state.loop = None
    logger.info("server.stopped")


app = FastAPI(
    title="Mood Adapt",
    version=__version__,
    description="Multimodal mood inference and interface-adaptation decisions.",
    lifespan=lifespan,
)

setup_middleware(app)
app.include_router(mood_router)
app.include_router(adaptations_router)


@app.get("/health")
async def health():
    loop: DecisionLoop | None = getattr(app.state, "loop", None)
    return {
        "status": "ok" if loop is not None else "starting",
        "version": __version__,
        "ledger": loop.core.ledger.stats() if loop is not None else None,
    }
