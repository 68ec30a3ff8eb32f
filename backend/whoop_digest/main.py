"""FastAPI application entry point for the WHOOP Digest API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from whoop_digest import __version__
from whoop_digest.config import get_settings
from whoop_digest.routers import auth, data, notes

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: configure logging
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    yield


app = FastAPI(
    title="WHOOP Digest API",
    description="Daily, weekly and 30-day summaries of WHOOP recovery, sleep, strain and workouts",
    version=__version__,
    lifespan=lifespan,
)

cors_origins = [
    settings.FRONTEND_URL,
    "http://localhost:5173",
    "http://localhost:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(data.router, prefix="/api/data", tags=["WHOOP Data"])
app.include_router(notes.router, prefix="/api/notes", tags=["Notes"])


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - API information."""
    return {
        "name": "WHOOP Digest API",
        "version": __version__,
        "status": "running",
    }


@app.get("/health", tags=["Health"])
@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


def run() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    uvicorn.run("whoop_digest.main:app", host="0.0.0.0", port=8000, log_level=settings.LOG_LEVEL.lower())
