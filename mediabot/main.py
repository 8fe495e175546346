"""Main module for the media relay bot."""
import asyncio
import logging
import signal
from typing import Optional

from telegram import Update
from telegram.ext import Application, CommandHandler, MessageHandler, filters

from mediabot.config import BotConfig, load_config
from mediabot.delivery import DeliveryPipeline
from mediabot.error_handler import error_handler, log_unhandled_loop_exception
from mediabot.extraction import ExtractionClient, PlatformMatcher
from mediabot.handlers import (
    SERVICES_KEY,
    BotServices,
    handle_text_message,
    help_command,
    platforms_command,
    start,
)
from mediabot.health import start_health_server, stop_health_server
from mediabot.storage import connect_repository
from mediabot.temp_manager import cleanup_active_temp_managers, cleanup_old_temp_directories

logger = logging.getLogger(__name__)

HEALTH_RUNNER_KEY = "health_runner"


def configure_logging(level: str) -> None:
    """Configure root logging at the given level name."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, level.upper(), logging.INFO)
    )
    # PTB logs every getUpdates poll through httpx at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logger.info(f"Logging configured at level: {level}")


def build_services(config: BotConfig) -> BotServices:
    """Wire the handler collaborators from the configuration."""
    matcher = PlatformMatcher(config.PLATFORM_RULES)
    return BotServices(
        matcher=matcher,
        extraction_client=ExtractionClient.from_config(config, matcher),
        pipeline=DeliveryPipeline.from_config(config),
        repository=connect_repository(config),
    )


def build_application(config: BotConfig) -> Application:
    """Create the Telegram Application with handlers and lifecycle hooks."""

    async def post_init(application: Application) -> None:
        asyncio.get_running_loop().set_exception_handler(log_unhandled_loop_exception)
        application.bot_data[SERVICES_KEY] = build_services(config)
        application.bot_data[HEALTH_RUNNER_KEY] = await start_health_server(config.PORT)
        logger.info(f"Supported platforms: {application.bot_data[SERVICES_KEY].matcher.list_supported_platforms()}")

    async def post_shutdown(application: Application) -> None:
        runner = application.bot_data.pop(HEALTH_RUNNER_KEY, None)
        if runner is not None:
            await stop_health_server(runner)

        services = application.bot_data.pop(SERVICES_KEY, None)
        if services is not None:
            await services.repository.close()

        cleanup_active_temp_managers()
        logger.info("Shutdown complete")

    application = (
        Application.builder()
        .token(config.BOT_TOKEN)
        .concurrent_updates(True)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )

    application.add_handler(CommandHandler("start", start))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("platforms", platforms_command))

    # Links and any other plain text
    application.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_text_message))

    # Add global error handler
    application.add_error_handler(error_handler)
    logger.info("Handlers registered: /start, /help, /platforms, text links")

    return application


def main(config: Optional[BotConfig] = None) -> None:
    """Start the bot.

    Raises:
        ConfigurationError: If the configuration is missing or invalid
    """
    if config is None:
        config = load_config()
    configure_logging(config.LOG_LEVEL)

    cleanup_old_temp_directories(base_dir=config.TEMP_DIR)

    application = build_application(config)

    # Run the bot until SIGINT or SIGTERM
    logger.info("Starting bot...")
    application.run_polling(
        allowed_updates=Update.ALL_TYPES,
        stop_signals=(signal.SIGINT, signal.SIGTERM),
    )


if __name__ == "__main__":
    main()
