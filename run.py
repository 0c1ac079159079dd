"""Entry point for the library circulation API.

Starts the FastAPI application under uvicorn.  Host, port and log
level come from the same environment variables as the rest of the
settings (``API_HOST``, ``API_PORT``, ``LOG_LEVEL``).

Usage:
    python run.py
"""
import asyncio
import logging

from uvicorn import Config, Server

from library_circulation_api.app.core.config import settings
from library_circulation_api.app.main import app


async def run_api() -> None:
    """Serve the API until interrupted."""
    config = Config(
        app=app,
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    logging.getLogger(__name__).info("Running on port %s", settings.api_port)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        pass
