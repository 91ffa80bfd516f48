"""
MowBot FastAPI Application

Main entry point for the MowBot brain lab server.
Configures FastAPI with CORS, routes, the revision archive and the
simulation loop.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from mowbot.config import get_settings
from mowbot.database import SessionLocal, init_db
from mowbot.core.engine import get_engine
from mowbot.services.revision_service import create_archive_listener
from mowbot.api.routes import brain, config, health, revisions, telemetry, world

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Handles:
    - Database initialisation and ledger archiving on startup
    - Starting and stopping the simulation loop
    """
    # Startup
    print(f"Starting {settings.APP_NAME} v{settings.VERSION}")
    init_db()

    engine = get_engine()
    engine.ledger.add_listener(create_archive_listener(SessionLocal))
    await engine.start_loop()
    print(f"Server ready on {settings.server.HOST}:{settings.server.PORT}")

    yield

    # Shutdown
    print("Shutting down server...")
    await engine.stop_loop()


# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="A robot mower simulator driven by user-written brain scripts",
    lifespan=lifespan,
    debug=settings.DEBUG,
)

# Configure CORS
origins = [
    "http://localhost:5173",  # Vite default port
    "http://localhost:3000",  # Alternative React port
    "http://127.0.0.1:5173",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(brain.router)
app.include_router(revisions.router)
app.include_router(telemetry.router)
app.include_router(world.router)
app.include_router(config.router)


@app.get("/")
async def root() -> dict:
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API information.
    """
    return {
        "message": f"Welcome to {settings.APP_NAME}",
        "version": settings.VERSION,
        "docs": "/docs",
        "health": "/health",
        "brain": "/brain/status",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.server.HOST, port=settings.server.PORT, reload=settings.DEBUG)
