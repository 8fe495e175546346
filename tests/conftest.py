"""Shared fixtures: mocked Telegram objects and relay collaborators."""
import pytest
from unittest.mock import AsyncMock, MagicMock

from mediabot.extraction import MediaInfo, MediaType, PlatformMatcher, PlatformRule


PLATFORM_RULES = (
    PlatformRule(name="tiktok", patterns=("tiktok.com", "vt.tiktok")),
    PlatformRule(name="instagram", patterns=("instagram.com", "instagr.am")),
    PlatformRule(name="youtube", patterns=("youtube.com", "youtu.be")),
)


@pytest.fixture
def platform_rules():
    return PLATFORM_RULES


@pytest.fixture
def matcher():
    return PlatformMatcher(PLATFORM_RULES)


@pytest.fixture
def mock_message():
    """Create mock Telegram message with async reply methods."""
    message = MagicMock()
    message.text = ""
    message.reply_text = AsyncMock()
    message.reply_video = AsyncMock()
    message.reply_audio = AsyncMock()
    message.reply_photo = AsyncMock()
    message.reply_document = AsyncMock()
    return message


@pytest.fixture
def mock_update(mock_message):
    """Create mock update object."""
    update = MagicMock()
    update.effective_user = MagicMock()
    update.effective_user.id = 12345
    update.effective_chat = MagicMock()
    update.effective_chat.id = 67890
    update.message = mock_message
    update.effective_message = mock_message
    return update


@pytest.fixture
def mock_context():
    """Create mock context object."""
    context = MagicMock()
    context.user_data = {}
    context.bot_data = {}
    context.bot = AsyncMock()
    context.args = []
    return context


@pytest.fixture
def video_info():
    return MediaInfo(
        platform="tiktok",
        media_url="https://cdn.example.com/v/123.mp4",
        thumbnail="https://cdn.example.com/t/123.jpg",
        type=MediaType.VIDEO,
        extension="mp4",
    )
