"""Entry point for the library REST service.

Starts the FastAPI application with uvicorn.  Host, port and log level
come from ``Settings`` (``API_HOST``, ``API_PORT``, ``LOG_LEVEL``
environment variables).

Usage:
    python run.py
"""
import asyncio

from uvicorn import Config, Server

from library_api.app.core.config import settings


async def main() -> None:
    """Serve the API until interrupted."""
    config = Config(
        app="library_api.app.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
