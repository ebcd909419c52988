"""Main FastAPI application entry point."""

import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .api import auth, health, outfits, tryon
from .core import Orchestrator, RequestBuilder, TryOnService
from .providers import (
    GeminiTransport,
    SupabaseIdentityProvider,
    SupabaseStorage,
    create_supabase_client,
)
from .utils.config import load_config
from .utils.logger import get_logger
from .utils.retry import RetryPolicy

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown.

    Builds every collaborator explicitly and stores the wired service in
    ``app.state``; closes the HTTP client on shutdown.
    """
    logger.info("Application starting up...")

    try:
        config = load_config()
        settings = config.generation

        transport = GeminiTransport.from_config(config)
        await transport.initialize()

        orchestrator = Orchestrator(
            transport=transport,
            builder=RequestBuilder(settings),
            policy=RetryPolicy(
                max_attempts=settings.max_retries,
                base_delay=settings.base_delay_seconds,
            ),
        )

        # Auth calls store a session on their client; keep that away from
        # the client used for storage
        identity = SupabaseIdentityProvider(
            create_supabase_client(config.supabase_url, config.supabase_anon_key)
        )
        store = SupabaseStorage(
            create_supabase_client(config.supabase_url, config.supabase_anon_key),
            bucket=config.supabase_bucket,
        )

        app.state.config = config
        app.state.transport = transport
        app.state.tryon_service = TryOnService(
            orchestrator=orchestrator,
            identity=identity,
            store=store,
        )

        logger.info("Application startup complete")

    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    yield

    logger.info("Application shutting down...")
    await transport.close()
    logger.info("Application shutdown complete")


app = FastAPI(
    title="Try-On Agent",
    description="Composes clothing photos onto person photos with a generative image API",
    version=__version__,
    lifespan=lifespan,
)

# Add CORS middleware (adjust origins for production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(tryon.router, prefix="/tryon", tags=["tryon"])
app.include_router(outfits.router, tags=["outfits"])
app.include_router(auth.router, prefix="/auth", tags=["auth"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "tryon-agent",
        "version": __version__,
        "status": "running",
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))

    uvicorn.run(
        "tryon_agent.main:app",
        host="0.0.0.0",
        port=port,
        reload=True,
        log_level="info",
    )
