"""Telegram bot handlers for the media relay."""
import logging
import uuid
from dataclasses import dataclass

from telegram import Update
from telegram.ext import ContextTypes

from mediabot.delivery import DeliveryPipeline
from mediabot.error_handler import reply_with_error
from mediabot.extraction import ExtractionClient, ExtractionError, PlatformMatcher
from mediabot.storage import VideoRecord, VideoRepository

logger = logging.getLogger(__name__)

SERVICES_KEY = "services"

URL_PREFIXES = ("http", "www.")

INVALID_MESSAGE = "Pesan tidak valid. Tolong kirimkan teks yang sesuai."
SEND_LINK_MESSAGE = (
    "Tolong kirimkan link dari platform yang didukung. "
    "Gunakan /help untuk informasi lebih lanjut."
)
UNSUPPORTED_PLATFORM_MESSAGE = (
    "Platform ini mungkin belum didukung. "
    "Gunakan /platforms untuk melihat daftar platform yang didukung."
)
PROCESSING_ERROR_MESSAGE = (
    "Terjadi kesalahan saat memproses media dari {platform}. "
    "Pastikan URL yang kamu kirim valid dan konten tidak diprivat."
)


@dataclass
class BotServices:
    """Collaborators shared by all handlers, stored in ``bot_data``."""

    matcher: PlatformMatcher
    extraction_client: ExtractionClient
    pipeline: DeliveryPipeline
    repository: VideoRepository


def get_services(context: ContextTypes.DEFAULT_TYPE) -> BotServices:
    return context.bot_data[SERVICES_KEY]


def looks_like_url(text: str) -> bool:
    """True for text that starts like a link (``http...`` or ``www.``)."""
    return text.lower().startswith(URL_PREFIXES)


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Send a welcome message when the command /start is issued."""
    await update.message.reply_text(
        "Selamat datang di Multi-Platform Media Downloader Bot!\n\n"
        "Bot ini dapat mengunduh video, audio, dan gambar dari berbagai platform "
        "media sosial dan situs web.\n\n"
        "Kirimkan link untuk mengunduh media, atau gunakan /help untuk informasi lebih lanjut."
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Show usage, supported platforms and available commands."""
    platforms = get_services(context).matcher.list_supported_platforms()
    await update.message.reply_text(
        "Multi-Platform Media Downloader Bot\n\n"
        "Cara penggunaan:\n"
        "- Kirim link dari platform yang didukung\n"
        "- Tunggu beberapa saat hingga bot memproses dan mengirimkan medianya\n\n"
        "Platform yang didukung:\n"
        f"{platforms}\n\n"
        "Perintah:\n"
        "/start - Memulai bot\n"
        "/help - Menampilkan bantuan\n"
        "/platforms - Menampilkan daftar platform yang didukung\n\n"
        "Note: Pastikan link yang kamu kirim valid dan konten tidak diprivat."
    )


async def platforms_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """List supported platforms."""
    platforms = get_services(context).matcher.list_supported_platforms()
    await update.message.reply_text(f"Platform yang didukung:\n\n{platforms}")


async def handle_text_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle plain text: relay links from supported platforms.

    Identifies the platform, asks the extraction API for the media,
    records the result and delivers the file. Each failure ends the
    handling of this message with one notice to the user.

    Args:
        update: Telegram update object
        context: Telegram context object
    """
    message = update.effective_message
    if message is None:
        return

    if not message.text:
        await message.reply_text(INVALID_MESSAGE)
        return

    text = message.text.strip()
    if text.startswith("/"):
        return

    if not looks_like_url(text):
        await message.reply_text(SEND_LINK_MESSAGE)
        return

    services = get_services(context)
    user_id = update.effective_user.id if update.effective_user else "unknown"
    correlation_id = str(uuid.uuid4())[:8]

    platform = services.matcher.identify_platform(text)
    if not platform:
        logger.info(f"[{correlation_id}] Unsupported link from user {user_id}: {text}")
        await message.reply_text(UNSUPPORTED_PLATFORM_MESSAGE)
        return

    logger.info(f"[{correlation_id}] {platform} link received from user {user_id}")
    await message.reply_text(f"Sedang memproses link dari {platform}...")

    try:
        media_info = await services.extraction_client.fetch_media(text, correlation_id=correlation_id)
        await services.repository.save(
            VideoRecord.from_media_info(media_info, original_url=text),
            correlation_id=correlation_id,
        )
    except ExtractionError as e:
        logger.error(f"[{correlation_id}] Error processing {platform} link: {e}")
        await reply_with_error(
            message, e, PROCESSING_ERROR_MESSAGE.format(platform=platform), correlation_id
        )
        return
    except Exception as e:
        logger.exception(f"[{correlation_id}] Unexpected error processing {platform} link: {e}")
        await reply_with_error(
            message, e, PROCESSING_ERROR_MESSAGE.format(platform=platform), correlation_id
        )
        return

    await services.pipeline.deliver(message, media_info, correlation_id=correlation_id)
    logger.debug(f"[{correlation_id}] Handling completed for user {user_id}")
