from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from snowops_tickets.api.routes import assignments, health, tickets, trips
from snowops_tickets.core.config import get_settings
from snowops_tickets.core.logging import configure_logging, init_tracer, shutdown_tracer
from snowops_tickets.db.session import (
    check_connection,
    create_engine_from_settings,
    create_session_factory,
    ensure_schema,
)


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - executed by framework
    settings = get_settings()
    logger = configure_logging(settings)
    tracer_provider = init_tracer(settings)

    app.state.logger = logger
    app.state.tracer_provider = tracer_provider
    app.state.db_engine = None
    app.state.db_session_factory = None

    db_engine = create_engine_from_settings(settings)
    try:
        await check_connection(db_engine)
        await ensure_schema(db_engine)
    except (OSError, SQLAlchemyError):
        logger.exception("database initialisation failed; ticket routes will answer 503")
        await db_engine.dispose()
        db_engine = None
    else:
        app.state.db_engine = db_engine
        app.state.db_session_factory = create_session_factory(db_engine)
        logger.info("database ready")

    try:
        yield
    finally:
        if db_engine is not None:
            await db_engine.dispose()
        shutdown_tracer(tracer_provider)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.include_router(health.router)
    app.include_router(tickets.router)
    app.include_router(assignments.router)
    app.include_router(trips.router)
    return app


app = create_app()
