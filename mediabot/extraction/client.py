"""HTTP client for the third-party media extraction API.

Sends the user's URL to the configured RapidAPI endpoint with aiohttp,
then hands the decoded JSON to the media selector. Every failure along
the way surfaces as ExtractionFailedError.
"""
import asyncio
import logging
from typing import Any, Optional

import aiohttp

from .exceptions import ExtractionFailedError, MediaNotFoundError
from .platforms import PlatformMatcher
from .selector import select_best_media
from .types import MediaInfo

logger = logging.getLogger(__name__)


class ExtractionClient:
    """Client for the media extraction API.

    Attributes:
        api_url: Endpoint receiving ``POST {"url": ...}``
        api_key: Value of the ``x-rapidapi-key`` header
        api_host: Value of the ``x-rapidapi-host`` header
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        api_host: str,
        matcher: Optional[PlatformMatcher] = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.api_host = api_host
        self._matcher = matcher

    @classmethod
    def from_config(cls, config, matcher: Optional[PlatformMatcher] = None) -> "ExtractionClient":
        return cls(
            api_url=config.RAPIDAPI_URL,
            api_key=config.RAPIDAPI_KEY,
            api_host=config.RAPIDAPI_HOST,
            matcher=matcher,
        )

    @property
    def headers(self) -> dict:
        return {
            "x-rapidapi-key": self.api_key,
            "x-rapidapi-host": self.api_host,
            "Content-Type": "application/json",
        }

    async def _request_extraction(self, url: str) -> Any:
        """POST the URL to the API and return the decoded JSON body.

        Raises:
            aiohttp.ClientError: On connection failures and non-2xx responses
            ValueError: If the body is not valid JSON
        """
        async with aiohttp.ClientSession() as session:
            async with session.post(self.api_url, json={"url": url}, headers=self.headers) as response:
                response.raise_for_status()
                return await response.json(content_type=None)

    async def fetch_media(self, url: str, correlation_id: Optional[str] = None) -> MediaInfo:
        """Resolve a user URL into the best downloadable media.

        Args:
            url: URL sent by the user
            correlation_id: Optional correlation ID for request tracing

        Returns:
            MediaInfo for the selected media

        Raises:
            ExtractionFailedError: If the request fails or no media is usable
        """
        cid = correlation_id or "no-cid"
        platform = self._matcher.identify_platform(url) if self._matcher else None
        logger.info(f"[{cid}] Requesting extraction for {url}")

        try:
            payload = await self._request_extraction(url)
            if isinstance(payload, dict):
                logger.info(f"[{cid}] API response source: {payload.get('source')}")
            media_info = select_best_media(payload, url, self._matcher)
        except aiohttp.ClientResponseError as e:
            logger.error(f"[{cid}] Extraction API returned HTTP {e.status} for {url}")
            raise ExtractionFailedError(
                cause=e,
                message=f"Extraction API returned HTTP {e.status}",
                url=url,
                correlation_id=correlation_id,
                platform=platform,
            ) from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"[{cid}] Extraction request failed for {url}: {e!r}")
            raise ExtractionFailedError(
                cause=e,
                message="Extraction request failed",
                url=url,
                correlation_id=correlation_id,
                platform=platform,
            ) from e
        except ValueError as e:
            logger.error(f"[{cid}] Extraction API returned an undecodable body for {url}: {e}")
            raise ExtractionFailedError(
                cause=e,
                message="Extraction API returned invalid JSON",
                url=url,
                correlation_id=correlation_id,
                platform=platform,
            ) from e
        except MediaNotFoundError as e:
            logger.warning(f"[{cid}] No usable media for {url}: {e.message}")
            raise ExtractionFailedError(
                cause=e,
                url=url,
                correlation_id=correlation_id,
                platform=platform or e.platform,
            ) from e

        logger.info(
            f"[{cid}] Selected {media_info.type.value} ({media_info.extension}) "
            f"from {media_info.platform}"
        )
        return media_info
