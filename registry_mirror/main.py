import asyncio
import logging

from fastapi import FastAPI

from registry_mirror import __version__
from registry_mirror.api.registries import router as registries_router
from registry_mirror.core.dependencies import get_registries_config, get_settings, get_sources
from registry_mirror.services.updater import refresh_loop, update_registries

# Configure logging
logging.basicConfig(
    level=get_settings().log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Registry Mirror",
    version=__version__,
    description="Local mirror of remotely published package registries.",
)


@app.on_event("startup")
async def startup_event() -> None:
    """
    Install all configured registries in the background and keep them fresh.
    """
    sources = get_sources()
    logger.info(f"Configured {len(sources)} registry sources")
    asyncio.create_task(update_registries(sources))
    asyncio.create_task(
        refresh_loop(sources, get_registries_config().refresh_interval_seconds)
    )


@app.get("/health")
async def health() -> dict:
    """
    Lightweight health check endpoint.
    """
    return {"status": "ok"}


app.include_router(registries_router, tags=["registries"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "registry_mirror.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
