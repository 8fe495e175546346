"""HTTP liveness endpoint served next to the bot."""
import logging

from aiohttp import web

logger = logging.getLogger(__name__)

LIVENESS_TEXT = "Bot is running!"


async def health_check(request: web.Request) -> web.Response:
    return web.Response(text=LIVENESS_TEXT)


def create_health_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/", health_check)
    return app


async def start_health_server(port: int, host: str = "0.0.0.0") -> web.AppRunner:
    """Start serving the liveness endpoint.

    Returns:
        The runner; pass it to stop_health_server on shutdown
    """
    runner = web.AppRunner(create_health_app())
    await runner.setup()
    site = web.TCPSite(runner, host=host, port=port)
    await site.start()
    logger.info(f"Server running on port {port}")
    return runner


async def stop_health_server(runner: web.AppRunner) -> None:
    await runner.cleanup()
    logger.info("Health server stopped")
