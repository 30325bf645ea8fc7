# api/main.py

import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from sqlalchemy import create_engine
from .routers import achievements, auth, skills, users
import api.database # To access and re-assign api.database.engine


def configure_logging():
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # The Neo4j driver connects lazily on first use
    yield
    api.database.graph_db_manager.close()


def create_app():
    # Initialize the database engine here, ensuring it uses the
    # environment variables set by pytest_configure for tests.
    DATABASE_URL = os.getenv("DATABASE_URL")
    if not DATABASE_URL:
        raise RuntimeError("DATABASE_URL environment variable not set at app creation time.")

    # Re-assign the engine in the database module.
    # This allows existing parts of the app (like get_db) to use the new engine.
    api.database.engine = create_engine(DATABASE_URL)

    configure_logging()

    app = FastAPI(
        lifespan=lifespan,
        title="Skill Tree API",
        description="Calisthenics skill progression: skill graph, hierarchy and user progress.",
        version="0.1.0",
    )

    # Include routers with their default prefixes (used by tests)
    app.include_router(skills.router, prefix="/skills")
    app.include_router(users.router)
    app.include_router(auth.router)
    app.include_router(achievements.router)

    # Also expose the same routes under /api for the frontend
    api_prefix = "/api"
    app.include_router(skills.router, prefix=f"{api_prefix}/skills")
    app.include_router(users.router, prefix=api_prefix)
    app.include_router(auth.router, prefix=api_prefix)
    app.include_router(achievements.router, prefix=api_prefix)

    return app

# For production, uvicorn can be told to use the factory: uvicorn api.main:create_app --factory
app = create_app()
