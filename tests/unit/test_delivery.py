"""Tests for the delivery pipeline."""
import logging
import os

import pytest
from aiohttp import web
from aiohttp import test_utils
from telegram.error import BadRequest, NetworkError
from unittest.mock import AsyncMock, patch

from mediabot.delivery import DeliveryPipeline, build_temp_filename
from mediabot.extraction import MediaFetchError, MediaInfo, MediaType


def _media(media_type, extension):
    return MediaInfo(
        platform="instagram",
        media_url="https://cdn.example.com/file",
        thumbnail="",
        type=media_type,
        extension=extension,
    )


@pytest.fixture
def pipeline(tmp_path):
    pipeline = DeliveryPipeline(fetch_timeout=90, temp_dir=str(tmp_path))
    pipeline._fetch_media_bytes = AsyncMock(return_value=b"media-bytes")
    return pipeline


class TestBuildTempFilename:

    def test_named_from_type_timestamp_extension(self, video_info):
        assert build_temp_filename(video_info, 1700000000000) == "video_1700000000000.mp4"

    def test_unknown_type_uses_media_prefix(self):
        info = _media(MediaType.UNKNOWN, "")
        assert build_temp_filename(info, 5) == "media_5.bin"


class TestDeliver:
    """Tests for DeliveryPipeline.deliver."""

    @pytest.mark.asyncio
    async def test_video_sent_and_temp_removed(self, pipeline, mock_message, video_info, tmp_path):
        seen = {}

        def record_file(**kwargs):
            seen["path"] = kwargs["video"].name
            seen["exists"] = os.path.exists(kwargs["video"].name)
            with open(kwargs["video"].name, "rb") as f:
                seen["content"] = f.read()

        mock_message.reply_video.side_effect = record_file

        assert await pipeline.deliver(mock_message, video_info) is True

        notice = mock_message.reply_text.call_args_list[0][0][0]
        assert "video" in notice and "tiktok" in notice
        mock_message.reply_video.assert_awaited_once()
        assert mock_message.reply_video.call_args[1]["caption"] == "Video dari tiktok"
        assert seen["exists"] is True
        assert seen["content"] == b"media-bytes"
        assert os.path.basename(seen["path"]).startswith("video_")
        assert not os.path.exists(seen["path"])
        assert list(tmp_path.iterdir()) == []
        mock_message.reply_document.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("media_type,method,caption", [
        (MediaType.AUDIO, "reply_audio", "Audio dari instagram"),
        (MediaType.IMAGE, "reply_photo", "Gambar dari instagram"),
        (MediaType.UNKNOWN, "reply_document", "Media dari instagram"),
    ])
    async def test_send_method_matches_type(self, pipeline, mock_message, media_type, method, caption):
        assert await pipeline.deliver(mock_message, _media(media_type, "bin")) is True

        send = getattr(mock_message, method)
        send.assert_awaited_once()
        assert send.call_args[1]["caption"] == caption

    @pytest.mark.asyncio
    async def test_falls_back_to_document_once(self, pipeline, mock_message, video_info, tmp_path):
        mock_message.reply_video.side_effect = BadRequest("Request entity too large")

        assert await pipeline.deliver(mock_message, video_info) is True

        mock_message.reply_video.assert_awaited_once()
        mock_message.reply_document.assert_awaited_once()
        assert mock_message.reply_document.call_args[1]["caption"] == "Media dari tiktok (dikirim sebagai file)"
        # Only the "downloading" notice, no failure notice
        assert mock_message.reply_text.await_count == 1
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_fallback_failure_reports_once(self, pipeline, mock_message, video_info, tmp_path):
        mock_message.reply_video.side_effect = BadRequest("Request entity too large")
        mock_message.reply_document.side_effect = NetworkError("connection reset")

        assert await pipeline.deliver(mock_message, video_info) is False

        mock_message.reply_document.assert_awaited_once()
        assert mock_message.reply_text.await_count == 2
        failure = mock_message.reply_text.call_args_list[1][0][0]
        assert "Terjadi kesalahan saat mengirim video" in failure
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_fetch_failure_reports_and_sends_nothing(self, pipeline, mock_message, video_info, tmp_path):
        pipeline._fetch_media_bytes.side_effect = MediaFetchError(media_type="video")

        assert await pipeline.deliver(mock_message, video_info) is False

        mock_message.reply_video.assert_not_called()
        mock_message.reply_document.assert_not_called()
        assert mock_message.reply_text.await_count == 2
        assert "Terjadi kesalahan saat mengirim video" in mock_message.reply_text.call_args[0][0]
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_unexpected_error_is_reported(self, pipeline, mock_message, video_info):
        mock_message.reply_video.side_effect = RuntimeError("unexpected")

        assert await pipeline.deliver(mock_message, video_info) is False
        mock_message.reply_document.assert_not_called()
        assert "Terjadi kesalahan saat mengirim video" in mock_message.reply_text.call_args[0][0]

    @pytest.mark.asyncio
    async def test_cleanup_error_is_logged_not_raised(self, pipeline, mock_message, video_info, caplog):
        with patch("mediabot.temp_manager.shutil.rmtree", side_effect=OSError("device busy")):
            with caplog.at_level(logging.WARNING, logger="mediabot.temp_manager"):
                assert await pipeline.deliver(mock_message, video_info) is True

        assert "Could not fully clean up temp directory" in caplog.text


class TestFetchMediaBytes:
    """Tests for the media GET against a local server."""

    @pytest.mark.asyncio
    async def test_reads_body(self, video_info):
        async def media(request):
            return web.Response(body=b"\x00\x01video")

        app = web.Application()
        app.router.add_get("/v.mp4", media)
        server = test_utils.TestServer(app)
        await server.start_server()
        try:
            info = MediaInfo("tiktok", str(server.make_url("/v.mp4")), "", MediaType.VIDEO, "mp4")
            content = await DeliveryPipeline()._fetch_media_bytes(info, "test")
        finally:
            await server.close()

        assert content == b"\x00\x01video"

    @pytest.mark.asyncio
    async def test_non_2xx_raises_fetch_error(self):
        app = web.Application()
        server = test_utils.TestServer(app)
        await server.start_server()
        try:
            info = MediaInfo("tiktok", str(server.make_url("/missing.mp4")), "", MediaType.VIDEO, "mp4")
            with pytest.raises(MediaFetchError) as exc_info:
                await DeliveryPipeline()._fetch_media_bytes(info, "test")
        finally:
            await server.close()

        assert "404" in exc_info.value.message

    def test_from_config(self):
        config = type("Config", (), {"MEDIA_FETCH_TIMEOUT": 45, "TEMP_DIR": "/tmp/x"})()
        pipeline = DeliveryPipeline.from_config(config)
        assert pipeline.fetch_timeout == 45
        assert pipeline.temp_dir == "/tmp/x"
