"""Delivery of selected media back into the Telegram chat.

Downloads the media file with aiohttp, stores it in a scoped temp
directory and sends it with the reply method matching its type. A failed
typed send is retried once as a plain document.
"""
import asyncio
import logging
import time
from typing import Optional, Tuple

import aiofiles
import aiohttp
from telegram.error import TelegramError

from mediabot.extraction import MediaDeliveryError, MediaFetchError, MediaInfo, MediaSendError, MediaType
from mediabot.temp_manager import TempManager

logger = logging.getLogger(__name__)

DEFAULT_FETCH_TIMEOUT = 90

# media type -> (reply method, file keyword, caption label)
SEND_METHODS = {
    MediaType.VIDEO: ("reply_video", "video", "Video"),
    MediaType.AUDIO: ("reply_audio", "audio", "Audio"),
    MediaType.IMAGE: ("reply_photo", "photo", "Gambar"),
}
DOCUMENT_SEND: Tuple[str, str, str] = ("reply_document", "document", "Media")


def build_temp_filename(media_info: MediaInfo, timestamp_ms: Optional[int] = None) -> str:
    """Name a downloaded file from its type, a timestamp and its extension.

    Examples: ``video_1718000000000.mp4``, ``media_1718000000000.bin``
    """
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    prefix = media_info.type.value if media_info.type in SEND_METHODS else "media"
    extension = media_info.extension or "bin"
    return f"{prefix}_{timestamp_ms}.{extension}"


class DeliveryPipeline:
    """Downloads media and sends it to the requesting chat.

    Attributes:
        fetch_timeout: Total timeout in seconds for downloading the media
        temp_dir: Parent directory for scoped temp directories
    """

    def __init__(self, fetch_timeout: int = DEFAULT_FETCH_TIMEOUT, temp_dir: Optional[str] = None):
        self.fetch_timeout = fetch_timeout
        self.temp_dir = temp_dir

    @classmethod
    def from_config(cls, config) -> "DeliveryPipeline":
        return cls(fetch_timeout=config.MEDIA_FETCH_TIMEOUT, temp_dir=config.TEMP_DIR)

    async def _fetch_media_bytes(self, media_info: MediaInfo, correlation_id: str) -> bytes:
        """GET the media file.

        Raises:
            MediaFetchError: On timeout, connection failure or non-2xx status
        """
        url = media_info.media_url
        try:
            timeout = aiohttp.ClientTimeout(total=self.fetch_timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.get(url, allow_redirects=True) as response:
                    response.raise_for_status()
                    content = await response.read()
        except aiohttp.ClientResponseError as e:
            raise MediaFetchError(
                message=f"Media download returned HTTP {e.status}",
                url=url,
                correlation_id=correlation_id,
                media_type=media_info.type.value,
            ) from e
        except asyncio.TimeoutError as e:
            raise MediaFetchError(
                message=f"Media download timed out after {self.fetch_timeout}s",
                url=url,
                correlation_id=correlation_id,
                media_type=media_info.type.value,
            ) from e
        except aiohttp.ClientError as e:
            raise MediaFetchError(
                message=f"Media download failed: {e}",
                url=url,
                correlation_id=correlation_id,
                media_type=media_info.type.value,
            ) from e

        logger.info(f"[{correlation_id}] Downloaded {len(content)} bytes from {url}")
        return content

    @staticmethod
    async def _write_file(path: str, content: bytes) -> None:
        async with aiofiles.open(path, "wb") as f:
            await f.write(content)

    @staticmethod
    async def _send_file(message, send: Tuple[str, str, str], path: str, caption: str) -> None:
        method_name, file_keyword, _ = send
        with open(path, "rb") as media_file:
            await getattr(message, method_name)(**{file_keyword: media_file, "caption": caption})

    async def _send_with_fallback(self, message, media_info: MediaInfo, path: str, correlation_id: str) -> None:
        """Send with the typed method, falling back once to a document.

        Raises:
            MediaSendError: If the document fallback fails too
        """
        send = SEND_METHODS.get(media_info.type, DOCUMENT_SEND)
        try:
            await self._send_file(message, send, path, f"{send[2]} dari {media_info.platform}")
            logger.info(f"[{correlation_id}] Sent {media_info.type.value} via {send[0]}")
            return
        except (TelegramError, OSError) as e:
            logger.warning(f"[{correlation_id}] {send[0]} failed, trying as document: {e}")

        try:
            await self._send_file(
                message,
                DOCUMENT_SEND,
                path,
                f"Media dari {media_info.platform} (dikirim sebagai file)",
            )
        except (TelegramError, OSError) as e:
            raise MediaSendError(
                message=f"Document fallback failed: {e}",
                url=media_info.media_url,
                correlation_id=correlation_id,
                media_type=media_info.type.value,
            ) from e
        logger.info(f"[{correlation_id}] Sent {media_info.type.value} as document")

    async def _report_failure(self, message, text: str, correlation_id: str) -> None:
        try:
            await message.reply_text(text)
        except Exception as e:
            logger.error(f"[{correlation_id}] Failed to send error message: {e}")

    async def deliver(self, message, media_info: MediaInfo, correlation_id: Optional[str] = None) -> bool:
        """Download the media and send it to the chat of ``message``.

        Never raises for delivery problems: they are logged and reported to
        the user with a single notice. The temp directory is removed before
        this returns, on success and on failure.

        Args:
            message: Telegram message to reply to
            media_info: Media chosen by the extraction client
            correlation_id: Optional correlation ID for request tracing

        Returns:
            True if the media was sent, False otherwise
        """
        cid = correlation_id or "no-cid"
        media_type = media_info.type.value

        try:
            await message.reply_text(
                f"Sedang mengunduh {media_type} dari {media_info.platform}, mohon tunggu sebentar..."
            )
            content = await self._fetch_media_bytes(media_info, cid)

            with TempManager(base_dir=self.temp_dir, correlation_id=correlation_id) as temp_mgr:
                file_path = temp_mgr.get_temp_path(build_temp_filename(media_info))
                await self._write_file(file_path, content)
                logger.debug(f"[{cid}] Media written to {file_path}")
                await self._send_with_fallback(message, media_info, file_path, cid)

            return True

        except MediaDeliveryError as e:
            logger.error(f"[{cid}] Delivery failed: {e}")
            await self._report_failure(message, e.to_user_message(), cid)

        except Exception as e:
            logger.exception(f"[{cid}] Unexpected error delivering {media_type}: {e}")
            await self._report_failure(message, MediaDeliveryError(media_type=media_type).to_user_message(), cid)

        return False
