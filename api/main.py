# api/main.py

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy import create_engine

from .routers import auth, skills
import api.database  # To access and re-assign api.database.engine

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting skill tree API")
    yield
    api.database.graph_db_manager.close()
    logger.info("Skill tree API stopped")


def create_app():
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

    # Re-create the engine from the environment at app creation time, so tests
    # and deployments can point the app at their own database.
    database_url = os.getenv("DATABASE_URL")
    if database_url and database_url != str(api.database.engine.url):
        api.database.engine = create_engine(database_url)

    app = FastAPI(
        title="Skill Tree API",
        description="Bodyweight skill tree: catalog, progress, experience and layout.",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Routes at the root (used by tests) and under /api for the frontend
    for prefix in ("", "/api"):
        app.include_router(auth.router, prefix=prefix)
        app.include_router(skills.router, prefix=prefix)

    return app


# For uvicorn: `uvicorn api.main:app`, or `uvicorn api.main:create_app --factory`.
app = create_app()
