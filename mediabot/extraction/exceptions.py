"""Media relay exceptions with user-friendly error messages.

All exceptions support correlation IDs for request tracing and provide both
technical details (for logs) and user-friendly messages (for display, in
Indonesian like the rest of the bot's replies).

Exception Hierarchy:
    MediaBotError (base)
        ExtractionError
            MediaNotFoundError
            ExtractionFailedError
        MediaDeliveryError
            MediaFetchError
            MediaSendError
"""
import uuid
from typing import Optional


class MediaBotError(Exception):
    """Base exception for all relay errors.

    Attributes:
        message: Technical error message for logging
        url: The URL that was being processed (if available)
        correlation_id: Unique identifier for request tracing
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        correlation_id: Optional[str] = None
    ):
        self.message = message
        self.url = url
        self.correlation_id = correlation_id or self._generate_correlation_id()
        super().__init__(self.message)

    @staticmethod
    def _generate_correlation_id() -> str:
        """Generate a unique correlation ID for request tracing."""
        return str(uuid.uuid4())[:8]

    def to_user_message(self) -> str:
        """Return a user-friendly error message."""
        return "Terjadi kesalahan pada bot. Silakan coba lagi nanti."

    def __str__(self) -> str:
        parts = [self.message]
        if self.url:
            parts.append(f"url={self.url}")
        if self.correlation_id:
            parts.append(f"correlation_id={self.correlation_id}")
        return f"[{self.__class__.__name__}] {' | '.join(parts)}"


class ExtractionError(MediaBotError):
    """Raised when no usable media can be obtained for a URL."""

    def __init__(
        self,
        message: str = "Media extraction failed",
        url: Optional[str] = None,
        correlation_id: Optional[str] = None,
        platform: Optional[str] = None
    ):
        self.platform = platform
        super().__init__(message, url, correlation_id)

    def to_user_message(self) -> str:
        source = self.platform or "link tersebut"
        return (
            f"Terjadi kesalahan saat memproses media dari {source}. "
            "Pastikan URL yang kamu kirim valid dan konten tidak diprivat."
        )


class MediaNotFoundError(ExtractionError):
    """Raised when an API response holds no selectable media."""

    def __init__(
        self,
        message: str = "Media not found or failed to fetch",
        url: Optional[str] = None,
        correlation_id: Optional[str] = None,
        platform: Optional[str] = None
    ):
        super().__init__(message, url, correlation_id, platform)


class ExtractionFailedError(ExtractionError):
    """Raised for any failure of the extraction API round trip.

    Wraps transport errors, non-2xx responses, undecodable bodies and
    MediaNotFoundError so callers deal with a single error type.

    Attributes:
        cause: The underlying exception
    """

    def __init__(
        self,
        cause: Optional[BaseException] = None,
        message: Optional[str] = None,
        url: Optional[str] = None,
        correlation_id: Optional[str] = None,
        platform: Optional[str] = None
    ):
        self.cause = cause
        msg = message or "Media extraction failed"
        if cause is not None:
            msg += f": {cause}"
        super().__init__(msg, url, correlation_id, platform)


class MediaDeliveryError(MediaBotError):
    """Raised when selected media cannot be delivered to the chat.

    Attributes:
        media_type: Type of the media being delivered
    """

    def __init__(
        self,
        message: str = "Media delivery failed",
        url: Optional[str] = None,
        correlation_id: Optional[str] = None,
        media_type: str = "media"
    ):
        self.media_type = media_type
        super().__init__(message, url, correlation_id)

    def to_user_message(self) -> str:
        return (
            f"Terjadi kesalahan saat mengirim {self.media_type}. "
            "Media mungkin terlalu besar atau tidak tersedia."
        )


class MediaFetchError(MediaDeliveryError):
    """Raised when downloading the media file fails or times out."""


class MediaSendError(MediaDeliveryError):
    """Raised when both the typed send and the document fallback fail."""


__all__ = [
    "MediaBotError",
    "ExtractionError",
    "MediaNotFoundError",
    "ExtractionFailedError",
    "MediaDeliveryError",
    "MediaFetchError",
    "MediaSendError",
]
